import json
import random

import click
from flask.cli import AppGroup
from wcpool.config import GENERATED_THIRD_PLACE_TABLE
from wcpool.errors import EngineError
from wcpool.extensions import db
from wcpool.models.team import Team
from wcpool.models.match import Match, Stage, STAGE_ORDER
from wcpool.models.standing import GroupStanding, ThirdPlaceRanking
from wcpool.models.form import Form, MatchPick, AdvancePick, TopScorerPick
from wcpool.models.league import League
from wcpool.models.settings import SETTINGS_ID, TournamentSettings
from wcpool.seeds.data import (
    TEAMS,
    DEMO_LEAGUE,
    DEMO_NICKNAMES,
    TOP_SCORER_CANDIDATES,
    ADVANCE_PICK_COUNTS,
    build_schedule,
)
from wcpool.seeds.third_place_table import build_table
from wcpool.services.match_service import apply_match_result
from wcpool.tournament import GROUP_LETTERS

seed_cli = AppGroup("seed", help="Seed database commands.")


def create_tournament():
    """Teams, standings, third-place placeholders, settings and the 104 fixtures.

    Safe to run repeatedly: existing rows are left alone. Returns the
    number of rows created per table.
    """
    created = {"teams": 0, "standings": 0, "third_place": 0, "matches": 0}

    teams = {}
    for letter, position, name, fifa_code in TEAMS:
        team = Team.query.filter_by(fifa_code=fifa_code).first()
        if not team:
            team = Team(
                name=name,
                fifa_code=fifa_code,
                group_letter=letter,
                group_position=position,
            )
            db.session.add(team)
            created["teams"] += 1
        teams[f"{letter}{position}"] = team
    db.session.flush()

    for team in teams.values():
        exists = GroupStanding.query.filter_by(team_id=team.id).first()
        if not exists:
            db.session.add(GroupStanding(
                group_letter=team.group_letter,
                position=team.group_position,
                team_id=team.id,
            ))
            created["standings"] += 1

    for letter in GROUP_LETTERS:
        if not ThirdPlaceRanking.query.filter_by(group_letter=letter).first():
            db.session.add(ThirdPlaceRanking(group_letter=letter))
            created["third_place"] += 1

    if not db.session.get(TournamentSettings, SETTINGS_ID):
        db.session.add(TournamentSettings(id=SETTINGS_ID))

    for fixture in build_schedule():
        if Match.query.filter_by(match_number=fixture["match_number"]).first():
            continue
        match = Match(**fixture)
        if fixture["stage"] == Stage.GROUP:
            match.team1_id = teams[fixture["team1_code"]].id
            match.team2_id = teams[fixture["team2_code"]].id
        db.session.add(match)
        created["matches"] += 1

    db.session.commit()
    return created


def create_demo_forms(count=len(DEMO_NICKNAMES), seed=42):
    """Forms with random picks, all members of the demo league."""
    rng = random.Random(seed)

    league = League.query.filter_by(join_code=DEMO_LEAGUE["join_code"]).first()
    if not league:
        league = League(**DEMO_LEAGUE)
        db.session.add(league)
        db.session.flush()

    matches = Match.query.order_by(Match.match_number).all()
    team_ids = [t.id for t in Team.query.order_by(Team.id).all()]
    if not matches or not team_ids:
        raise click.ClickException("Tournament must be seeded first. Run: flask seed tournament")

    created = 0
    for i in range(count):
        nickname = DEMO_NICKNAMES[i % len(DEMO_NICKNAMES)]
        owner_id = f"demo-{i + 1}"
        if Form.query.filter_by(owner_id=owner_id).first():
            continue

        form = Form(owner_id=owner_id, nickname=nickname, is_final=True)
        db.session.add(form)
        db.session.flush()

        for match in matches:
            db.session.add(MatchPick(
                form_id=form.id,
                match_id=match.id,
                pred_score1=rng.randint(0, 3),
                pred_score2=rng.randint(0, 3),
            ))

        # Each stage's picks are drawn from the previous stage's.
        pool = team_ids
        for stage in STAGE_ORDER[1:]:
            pool = rng.sample(pool, ADVANCE_PICK_COUNTS[stage.value])
            for team_id in pool:
                db.session.add(AdvancePick(form_id=form.id, stage=stage, team_id=team_id))

        db.session.add(TopScorerPick(
            form_id=form.id, player_name=rng.choice(TOP_SCORER_CANDIDATES)
        ))
        league.forms.append(form)
        created += 1

    db.session.commit()
    return created


@seed_cli.command("tournament")
def seed_tournament():
    """Seed the 48 teams, group tables and the 104-match schedule."""
    created = create_tournament()
    click.echo(
        f"Created {created['teams']} teams, {created['standings']} standings, "
        f"{created['third_place']} third place rows, {created['matches']} matches."
    )


@seed_cli.command("forms")
@click.option("--count", default=len(DEMO_NICKNAMES), show_default=True)
def seed_forms(count):
    """Seed demo prediction forms in the General league."""
    created = create_demo_forms(count)
    click.echo(f"Created {created} demo forms.")


@seed_cli.command("results")
@click.option(
    "--stage",
    type=click.Choice([s.value for s in Stage]),
    default=None,
    help="Only play matches of this stage.",
)
def seed_results(stage):
    """[DEMO] Play random results for every open match that has both teams."""
    rng = random.Random(42)
    played = 0
    errors = []

    # Later rounds only get teams once earlier ones finish, so loop until
    # a pass plays nothing.
    while True:
        query = Match.query.filter_by(is_finished=False).filter(
            Match.team1_id.isnot(None), Match.team2_id.isnot(None)
        )
        if stage:
            query = query.filter_by(stage=Stage(stage))
        pending = query.order_by(Match.match_number).all()
        if not pending:
            break

        for match in pending:
            score1, score2 = rng.randint(0, 4), rng.randint(0, 4)
            winner_id = None
            if match.is_knockout and score1 == score2:
                winner_id = rng.choice([match.team1_id, match.team2_id])
            try:
                apply_match_result(match.match_number, score1, score2, winner_id)
                played += 1
            except EngineError as e:
                errors.append(f"Match {match.match_number}: {e}")
        if errors:
            break

    click.echo(f"Played {played} matches.")
    if errors:
        click.echo(f"Errors ({len(errors)}):")
        for e in errors:
            click.echo(f"  - {e}")


@seed_cli.command("third-place-table")
@click.option(
    "--output",
    type=click.Path(dir_okay=False),
    default=str(GENERATED_THIRD_PLACE_TABLE),
    show_default=True,
)
def seed_third_place_table(output):
    """Write the generated (non-official) third place allocation table."""
    table = build_table()
    with open(output, "w", encoding="utf-8") as f:
        json.dump(table, f, indent=2)
        f.write("\n")
    click.echo(f"Wrote {len(table)} combinations to {output}")


@seed_cli.command("all")
@click.pass_context
def seed_all(ctx):
    """Seed the tournament and demo forms."""
    ctx.invoke(seed_tournament)
    ctx.invoke(seed_forms)
    click.echo("All seed data loaded successfully!")
