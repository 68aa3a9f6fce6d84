"""CLI entrypoint for geocoins."""

from __future__ import annotations

import typer
from rich import print

from geocoins.config import settings
from geocoins.errors import EmptyCacheError
from geocoins.models import CellIndex, GeoPoint
from geocoins.session import Direction, GameSession
from geocoins.telemetry import configure_logging

app = typer.Typer(help="Walk the grid, collect coins and stash them in caches")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level")) -> None:
    configure_logging("DEBUG" if verbose else settings.log_level)


def _open_session() -> GameSession:
    session = GameSession.from_settings(settings)
    session.start()
    if not session.persistence.available:
        print({"warning": "Storage unavailable; progress will not be saved."})
    return session


def _describe(session: GameSession) -> dict:
    cell = session.cell
    return {
        "location": session.player.location.to_dict(),
        "cell": cell.to_dict(),
        "coins": [token.label for token in session.player.inventory.tokens],
        "caches": [
            {"cell": cache.cell.to_dict(), "coins": cache.count()}
            for cache in session.active_caches.values()
        ],
        "path_segments": len(session.travel),
    }


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "tile_width": settings.tile_width,
            "visibility_radius": settings.visibility_radius,
            "spawn_probability": settings.spawn_probability,
            "max_initial_coins": settings.max_initial_coins,
            "state_dir": settings.state_dir,
        }
    )


@app.command()
def status() -> None:
    """Show the player's position, coins and the caches in view."""
    print(_describe(_open_session()))


@app.command()
def step(direction: Direction = typer.Argument(..., help="north/south/east/west")) -> None:
    """Walk one tile."""
    session = _open_session()
    session.step(direction)
    print(_describe(session))


@app.command()
def jump(
    lat: float = typer.Option(..., help="Latitude to teleport to"),
    long: float = typer.Option(..., help="Longitude to teleport to"),
) -> None:
    """Teleport to a position, e.g. a fresh geolocation fix."""
    session = _open_session()
    session.jump_to(GeoPoint(lat=lat, long=long))
    print(_describe(session))


def _transfer(action: str, i: int, j: int) -> None:
    session = _open_session()
    cell = CellIndex(i=i, j=j)
    try:
        token = session.collect(cell) if action == "collect" else session.deposit(cell)
    except KeyError as exc:
        print({"error": str(exc.args[0])})
        raise typer.Exit(code=1)
    except EmptyCacheError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)
    print({action: token.label, "player_coins": session.player.inventory.count()})


@app.command()
def collect(
    i: int = typer.Option(..., help="Cell row index"),
    j: int = typer.Option(..., help="Cell column index"),
) -> None:
    """Take the top coin from a nearby cache."""
    _transfer("collect", i, j)


@app.command()
def deposit(
    i: int = typer.Option(..., help="Cell row index"),
    j: int = typer.Option(..., help="Cell column index"),
) -> None:
    """Put your most recent coin into a nearby cache."""
    _transfer("deposit", i, j)


@app.command()
def locate(
    lat: float = typer.Option(..., help="Latitude"),
    long: float = typer.Option(..., help="Longitude"),
) -> None:
    """Show which cell a point falls in and that cell's bounds."""
    session = GameSession.from_settings(settings, persist=False)
    cell = session.board.cell_for(GeoPoint(lat=lat, long=long))
    top_left, bottom_right = session.board.cell_bounds(cell)
    print(
        {
            "cell": cell.to_dict(),
            "bounds": [top_left.to_dict(), bottom_right.to_dict()],
            "has_cache": session.board.generator.should_spawn(cell),
        }
    )


@app.command()
def reset() -> None:
    """Delete saved progress."""
    session = _open_session()
    session.reset()
    print({"reset": True})


if __name__ == "__main__":
    app()
