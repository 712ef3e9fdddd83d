"""Gameplay routes."""

from contextlib import contextmanager

from sqlmodel import Session
from xitzin import Redirect, Request, Xitzin
from xitzin.auth import get_identity, require_certificate

from ..engine.commands import CommandResult, end_combat
from ..session import ChronicleSession
from ..users import get_or_create_player, rename_player


@contextmanager
def _game_session(request: Request):
    """Load the player's game session with auto-close."""
    identity = get_identity(request)
    db_session = Session(request.app.state.engine)
    try:
        player = get_or_create_player(
            db_session, identity.fingerprint,
        )
        world = request.app.state.world
        yield ChronicleSession.load_or_create(
            db_session, player, world,
        )
    finally:
        db_session.close()


def _render_play(
    app: Xitzin, game: ChronicleSession, result: CommandResult | None = None
):
    """Render the main play view.

    The engine's message is shown verbatim; a fresh snapshot backs the
    status lines.
    """
    snapshot = game.snapshot()
    player = snapshot["player"]
    return app.template(
        "play.gmi",
        description=game.get_room_description(),
        message=result.message if result else "",
        failed=bool(result and not result.success),
        combat=bool(result and result.combat_triggered) or snapshot["in_combat"],
        player_name=player["name"],
        hp=player["hp"],
        max_hp=player["max_hp"],
        mp=player["mp"],
        max_mp=player["max_mp"],
        room=snapshot["room"],
        turns=game.turns,
    )


def _run(app: Xitzin, request: Request, raw_input: str):
    with _game_session(request) as game:
        result = game.process_command(raw_input)
        game.save()
        return _render_play(app, game, result)


def _register_action_routes(app: Xitzin) -> None:
    """Register command and movement routes."""

    @app.gemini("/play", name="play")
    @require_certificate
    def play(request: Request):
        """Main game view."""
        with _game_session(request) as game:
            game.save()
            return _render_play(app, game)

    @app.gemini("/go/{direction}", name="go")
    @require_certificate
    def go(request: Request, direction: str):
        """Movement via clickable link."""
        return _run(app, request, f"go {direction}")

    @app.input("/cmd", prompt="What do you want to do?", name="cmd")
    @require_certificate
    def cmd(request: Request, query: str):
        """Freeform command entry."""
        return _run(app, request, query)

    @app.gemini("/fight", name="fight")
    @require_certificate
    def fight(request: Request):
        """Minimal stand-in for a combat mode: one blow ends the encounter."""
        with _game_session(request) as game:
            result = game.process_command("attack")
            if result.success:
                end_combat(game.game)
                result.message += "\n\nYour foe retreats into the darkness."
            game.save()
            return _render_play(app, game, result)

    @app.gemini("/look", name="look")
    @require_certificate
    def look(request: Request):
        """Look around."""
        return _run(app, request, "look")


def _register_info_routes(app: Xitzin) -> None:
    """Register inventory, naming and game management routes."""

    @app.gemini("/inventory", name="inventory")
    @require_certificate
    def inventory(request: Request):
        """Show carried and equipped items."""
        return _run(app, request, "inventory")

    @app.input("/name", prompt="What is your name, traveler?", name="name")
    @require_certificate
    def name(request: Request, query: str):
        """Choose the name used for this and future games."""
        with _game_session(request) as game:
            rename_player(game.db_session, game.player, query)
            game.rename(game.player.name)
            game.save()
            return _render_play(
                app, game, CommandResult(True, f"Welcome, {game.player.name}."),
            )

    @app.input(
        "/new",
        prompt="Restarting resets the world for everyone. Type YES to confirm:",
        name="new_game",
    )
    @require_certificate
    def new_game(request: Request, query: str):
        """Restart with confirmation."""
        with _game_session(request) as game:
            if query.strip().upper() == "YES":
                result = game.reset()
                game.save()
                return _render_play(app, game, result)
            return Redirect("/play")


def register_routes(app: Xitzin) -> None:
    """Register gameplay routes."""
    _register_action_routes(app)
    _register_info_routes(app)
