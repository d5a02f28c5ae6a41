"""
raffle.cli.simulate
-------------------

Run raffle rounds on a throwaway local host.

Examples
--------
# One round with three players, human-readable summary
raffle-sim round --players 3

# Choose the random word the mock coordinator delivers, JSON output
raffle-sim round --players 3 --word 7 --json

# Show the effective configuration (presets + RAFFLE_* env)
raffle-sim config --chain-id 11155111
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import typer

from raffle import logging as rlog
from raffle.config import ETHER, UnsupportedChain, load_config
from raffle.deploy import deploy_raffle
from raffle.errors import RaffleError
from raffle.keeper import Keeper
from raffle.runtime import Host, address_from_label, to_hex
from raffle.version import __version__

app = typer.Typer(
    name="raffle-sim",
    help="Simulate VRF raffle rounds on a local host.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def _meta(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-V", help="Print version and exit", is_eager=True),
) -> None:
    if version:
        typer.echo(f"vrf-raffle {__version__}")
        raise typer.Exit(0)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _simulate(players: int, word: Optional[int], rounds: int) -> Dict[str, Any]:
    cfg = load_config()
    host = Host.from_config(cfg)
    deployer = address_from_label("deployer")
    host.fund(deployer, 100 * ETHER)
    dep = deploy_raffle(host, cfg, deployer=deployer)
    keeper = Keeper(host, dep.raffle, sender=address_from_label("keeper"))

    addrs = [address_from_label(f"player-{i}") for i in range(players)]
    for a in addrs:
        host.fund(a, rounds * cfg.entrance_fee)

    results: List[Dict[str, Any]] = []
    for _ in range(rounds):
        for a in addrs:
            host.call(dep.raffle, "enter_raffle", sender=a, value=cfg.entrance_fee)
        pool = host.view(dep.raffle, "get_pooled_balance")
        host.advance(seconds=cfg.interval + 1)
        request_id = keeper.tick()
        if request_id is None:
            raise typer.BadParameter("round never became eligible", param_hint="--players")
        if word is None:
            ok = host.call(dep.coordinator, "fulfill_random_words", request_id, dep.raffle, sender=deployer)
        else:
            ok = host.call(
                dep.coordinator, "fulfill_random_words_with_override", request_id, dep.raffle, [word], sender=deployer
            )
        winner = host.view(dep.raffle, "get_recent_winner")
        results.append(
            {
                "request_id": request_id,
                "fulfilled": ok,
                "pool": pool,
                "winner": to_hex(winner),
                "winner_index": addrs.index(winner) if winner in addrs else None,
                "winner_balance": host.balance_of(winner),
                "state": host.view(dep.raffle, "get_raffle_state").name,
            }
        )
    return {
        "deployment": dep.to_dict(),
        "players": [to_hex(a) for a in addrs],
        "rounds": results,
        "events": len(host.sink),
    }


@app.command("round")
def round_cmd(
    players: int = typer.Option(3, "--players", "-n", min=1, help="Number of participants"),
    rounds: int = typer.Option(1, "--rounds", "-r", min=1, help="Rounds to play back to back"),
    word: Optional[int] = typer.Option(None, "--word", "-w", min=0, help="Random word to deliver (default: mock DRBG)"),
    json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level for host/oracle logs"),
) -> None:
    """
    Deploy, let players enter, trigger upkeep and fulfil randomness.
    """
    rlog.configure(level=log_level)
    try:
        summary = _simulate(players, word, rounds)
    except RaffleError as e:
        if json_out:
            typer.echo(json.dumps({"ok": False, "error": e.to_dict()}))
        else:
            typer.echo(f"round failed: {e}", err=True)
        raise typer.Exit(1)

    if json_out:
        typer.echo(json.dumps({"ok": True, **summary}, indent=2, sort_keys=True))
        return
    typer.echo(f"raffle      {summary['deployment']['raffle']}")
    typer.echo(f"coordinator {summary['deployment']['coordinator']}")
    for i, r in enumerate(summary["rounds"]):
        typer.echo(
            f"round {i + 1}: request={r['request_id']} pool={r['pool']} "
            f"winner=#{r['winner_index']} {r['winner']} state={r['state']}"
        )


@app.command("config")
def config_cmd(
    chain_id: Optional[int] = typer.Option(None, "--chain-id", help="Preset to show (default: RAFFLE_CHAIN_ID or local)"),
) -> None:
    """Print the effective configuration as JSON."""
    try:
        cfg = load_config(chain_id) if chain_id is not None else load_config()
    except UnsupportedChain as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(2)
    typer.echo(json.dumps(cfg.as_dict(), indent=2, sort_keys=True))


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
