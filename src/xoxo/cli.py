"""
Command-line interface for xoxo.

Commands:
- list-games: Show available games
- list-players: Show player presets
- run: Play matches between two presets and record the results
- report: Show the wins/draws/losses matrix for a game
- play: Play against a preset in the terminal
- stats: Inspect a statistics file
- merge: Merge statistics files
- benchmark: Measure search speed
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional
import typer
import yaml
from rich.markup import escape
from rich.table import Table

from .errors import CorruptData, IllegalMove
from .utils import (
    Config,
    Logger,
    MatchLogger,
    console,
    setup_logging,
    create_progress,
    print_config,
    print_board,
    set_seed,
    derive_seed,
)

app = typer.Typer(
    name="xoxo",
    help="xoxo - Minimax and MCTS players for tic-tac-toe, ultimate tic-tac-toe and connect four",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print what the searches are doing"),
) -> None:
    setup_logging(verbose)


def _load_config(config_path: Optional[Path]) -> Config:
    if config_path is None:
        return Config()
    try:
        return Config.load(str(config_path))
    except (OSError, TypeError, yaml.YAMLError) as e:
        console.print(f"[red]Error: could not load config {config_path}: {escape(str(e))}[/]")
        raise typer.Exit(1)


def _get_game(game_name: str):
    from .games import get_game

    try:
        return get_game(game_name)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


def _build_player(
    game,
    preset: str,
    mark,
    data_dir: Path,
    **overrides,
):
    """
    Create a preset player; MCTS players load their statistics file.

    Keyword arguments override preset fields; None values are ignored.
    """
    from .mcts import StatsStore
    from .players import get_player_config, create_player, data_file_for

    try:
        config = get_player_config(preset, game.spec.name)
        config = config.with_overrides(**overrides)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)

    store = None
    data_file = None
    if config.persistent:
        data_file = data_file_for(data_dir, config, mark, game.spec.name)
        try:
            store = StatsStore.load(data_file, game=game.spec.name)
        except CorruptData as e:
            console.print(f"[red]Error: {e}[/]")
            raise typer.Exit(1)
        console.print(f"[blue]{preset} ({mark.symbol}): {len(store)} records from {data_file}[/]")

    return create_player(game, config, store=store, data_file=data_file)


def _finish(players) -> None:
    for player in players:
        try:
            player.finish()
        except OSError as e:
            console.print(f"[red]Error: could not save data for {player.name}: {e}[/]")
            raise typer.Exit(1)


@app.command("list-games")
def list_games_cmd() -> None:
    """List all available games."""
    from .games import list_games, get_game

    table = Table(title="Available Games")
    table.add_column("Name", style="cyan")
    table.add_column("Board", style="green")
    table.add_column("Actions", style="yellow")
    table.add_column("Max moves", style="white")

    for name in list_games():
        spec = get_game(name).spec
        board_str = "x".join(str(d) for d in spec.board_shape)
        table.add_row(name, board_str, str(spec.num_actions), str(spec.max_moves))

    console.print(table)


@app.command("list-players")
def list_players_cmd(
    game_name: Optional[str] = typer.Option(None, "--game", "-g", help="Show the tuning for this game"),
) -> None:
    """List player presets."""
    from .players import PlayerKind, list_presets, get_player_config

    if game_name is not None:
        _get_game(game_name)

    table = Table(title=f"Players ({game_name})" if game_name else "Players")
    table.add_column("Preset", style="cyan")
    table.add_column("Kind", style="green")
    table.add_column("Settings", style="yellow")
    table.add_column("Description")

    for preset in list_presets():
        config = get_player_config(preset, game_name)
        if config.kind in (PlayerKind.MINIMAX, PlayerKind.ALPHABETA):
            settings = f"depth={config.depth}"
        elif config.kind == PlayerKind.MCTS:
            settings = f"c={config.exploration:g}, iterations={config.iterations}"
        else:
            settings = ""
        table.add_row(preset, config.kind.value, settings, config.description)

    console.print(table)


@app.command()
def run(
    player_x: str = typer.Option(..., "--player-x", "-p", help="Preset moving first (X)"),
    player_o: str = typer.Option(..., "--player-o", "-q", help="Preset moving second (O)"),
    game_name: Optional[str] = typer.Option(None, "--game", "-g", help="Game to play"),
    games: Optional[int] = typer.Option(None, "--games", "-n", help="Number of matches"),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-i", help="MCTS iterations per move"),
    depth: Optional[int] = typer.Option(None, "--depth", help="Minimax / alpha-beta depth"),
    time_limit: Optional[float] = typer.Option(None, "--time-limit", help="MCTS seconds per move"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help="Statistics directory"),
    outfile: Optional[Path] = typer.Option(None, "--outfile", "-o", help="Results CSV file"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """Play matches between two presets and record the results."""
    from .games import Mark
    from .arena import play_match, append_result

    config = _load_config(config_path)
    game_name = game_name or config.game
    games = games if games is not None else config.arena.games
    time_limit = time_limit if time_limit is not None else config.mcts.time_limit
    data_dir = data_dir or Path(config.data_dir)
    outfile = outfile or Path(config.arena.results_file)
    seed = seed if seed is not None else config.seed

    if games < 1:
        console.print("[red]Error: --games must be at least 1[/]")
        raise typer.Exit(1)

    game = _get_game(game_name)
    if seed is not None:
        set_seed(seed)

    config.game = game_name
    config.data_dir = str(data_dir)
    config.arena.games = games
    config.arena.results_file = str(outfile)
    config.seed = seed
    config.ensure_dirs()

    logger = MatchLogger(config.arena.log_dir)
    logger.log_info(f"{player_x} (X) vs {player_o} (O) at {game_name}, {games} matches")

    overrides = dict(
        iterations=iterations if iterations is not None else config.mcts.iterations,
        exploration=config.mcts.exploration,
        rollout=config.mcts.rollout,
        time_limit=time_limit,
        depth=depth if depth is not None else config.search.depth,
    )
    px = _build_player(game, player_x, Mark.X, data_dir, seed=derive_seed(seed, 0), **overrides)
    po = _build_player(game, player_o, Mark.O, data_dir, seed=derive_seed(seed, 1), **overrides)

    tally = {"X": 0, "O": 0, "draw": 0}
    try:
        with create_progress() as progress:
            task = progress.add_task("Playing", total=games)
            for _ in range(games):
                result = play_match(game, px, po)
                append_result(outfile, result)
                logger.log_match(result)
                tally[result.result] += 1
                progress.update(task, advance=1)
    except IllegalMove as e:
        logger.log_error(f"Match aborted: {e}")
        _finish([px, po])
        raise typer.Exit(1)

    _finish([px, po])

    logger.log_success(
        f"{player_x} won {tally['X']}, {player_o} won {tally['O']}, {tally['draw']} drawn"
    )
    logger.log_info(f"Results appended to {outfile}")


@app.command()
def report(
    game_name: Optional[str] = typer.Option(None, "--game", "-g", help="Game to report on"),
    outfile: Optional[Path] = typer.Option(None, "--outfile", "-o", help="Results CSV file"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """Show the wins/draws/losses matrix for a game."""
    from .arena import load_results, summarize_results, print_report
    from .players import list_presets

    config = _load_config(config_path)
    game_name = game_name or config.game
    outfile = outfile or Path(config.arena.results_file)
    _get_game(game_name)

    try:
        results = load_results(outfile, game=game_name)
    except CorruptData as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)

    if not results:
        console.print(f"[yellow]No {game_name} results in {outfile}[/]")
        return

    presets = list_presets()
    names = {r.player_x for r in results} | {r.player_o for r in results}
    order = [p for p in presets if p in names] + sorted(names - set(presets))

    matrix = summarize_results(results, players=order)
    print_report(matrix, console, title=f"{game_name}: {matrix.total_games} matches")


@app.command()
def play(
    opponent: str = typer.Argument("mcts1", help="Preset to play against"),
    game_name: Optional[str] = typer.Option(None, "--game", "-g", help="Game to play"),
    human_first: bool = typer.Option(True, "--first/--second", help="Human plays first"),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-i", help="MCTS iterations per move"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help="Statistics directory"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """Play against a preset in the terminal."""
    from .games import Mark
    from .arena import play_match
    from .players import HumanPlayer

    config = _load_config(config_path)
    game = _get_game(game_name or config.game)
    data_dir = data_dir or Path(config.data_dir)

    human_mark = Mark.X if human_first else Mark.O
    ai_mark = human_mark.other()
    ai = _build_player(
        game,
        opponent,
        ai_mark,
        data_dir,
        iterations=iterations if iterations is not None else config.mcts.iterations,
        exploration=config.mcts.exploration,
        rollout=config.mcts.rollout,
        time_limit=config.mcts.time_limit,
        depth=config.search.depth,
    )
    human = HumanPlayer(game, console=console, name="You")

    console.print(f"\n[bold]Playing {game.spec.name}[/]")
    console.print(f"You are {human_mark.symbol}, {opponent} is {ai_mark.symbol}\n")

    positions = [game.initial_state()]

    def show_ai_move(state, move, mark):
        positions.append(state)
        if mark == ai_mark:
            console.print(f"[cyan]{opponent} played: {game.format_action(move)}[/]\n")

    players = (human, ai) if human_first else (ai, human)
    try:
        result = play_match(game, *players, on_move=show_ai_move)
    except IllegalMove as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)
    finally:
        _finish([ai])

    print_board(game.render(positions[-1]), title="Final position")

    if result.winner is None:
        console.print("[yellow]Draw![/]")
    elif result.winner == human_mark:
        console.print("[green]You win![/]")
    else:
        console.print(f"[red]{opponent} wins![/]")


@app.command()
def stats(
    path: Path = typer.Argument(..., help="Statistics file"),
    game_name: Optional[str] = typer.Option(None, "--game", "-g", help="Game the file belongs to"),
) -> None:
    """Inspect a statistics file."""
    from .games import get_game
    from .mcts import StatsStore

    if not path.exists():
        console.print(f"[red]Error: {path} does not exist[/]")
        raise typer.Exit(1)

    try:
        store = StatsStore.load(path, game=game_name)
    except CorruptData as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)

    table = Table(title=str(path), show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Game", store.game or "?")
    table.add_row("Records", f"{len(store):,}")
    table.add_row("Total visits", f"{store.total_visits:,}")
    table.add_row("File size", f"{path.stat().st_size:,} bytes")
    console.print(table)

    if not store.game:
        return

    # Statistics of the opening moves
    game = get_game(store.game)
    state = game.initial_state()
    moves = Table(title="Opening moves")
    moves.add_column("Move", style="cyan")
    moves.add_column("Visits", justify="right")
    moves.add_column("Win rate", justify="right")
    moves.add_column("Draw rate", justify="right")

    for action in game.legal_actions(state):
        record = store.get(game.identity(game.apply_action(state, action)))
        if record is None or record.visits == 0:
            continue
        moves.add_row(
            game.format_action(action),
            f"{record.visits:,}",
            f"{record.win_rate * 100:.1f}%",
            f"{record.draws / record.visits * 100:.1f}%",
        )
    if moves.row_count:
        console.print(moves)


@app.command()
def merge(
    output: Path = typer.Argument(..., help="File to merge into (created if absent)"),
    inputs: List[Path] = typer.Argument(..., help="Statistics files to merge"),
    game_name: Optional[str] = typer.Option(None, "--game", "-g", help="Expected game"),
) -> None:
    """Merge statistics files; counts of identical states are added."""
    from .mcts import StatsStore

    logger = Logger()
    try:
        store = StatsStore.load(output, game=game_name)
        for path in inputs:
            if not path.exists():
                logger.log_warning(f"Skipping {path}: no such file")
                continue
            incoming = StatsStore.load(path, game=game_name)
            store.merge(incoming)
            logger.log_info(f"Merged {len(incoming):,} records from {path}")
    except CorruptData as e:
        logger.log_error(f"Error: {e}")
        raise typer.Exit(1)

    store.save(output)
    logger.log_success(f"Saved {len(store):,} records ({store.total_visits:,} visits) to {output}")


@app.command()
def benchmark(
    game_name: str = typer.Argument("connect4", help="Game to benchmark"),
    iterations: int = typer.Option(2000, "--iterations", "-i", min=1, help="MCTS iterations per move"),
    depth: int = typer.Option(4, "--depth", min=1, help="Alpha-beta depth"),
    moves: int = typer.Option(5, "--moves", "-n", help="Moves to search"),
    seed: int = typer.Option(0, "--seed", "-s"),
    show_config: bool = typer.Option(False, "--show-config", help="Print the benchmark settings"),
) -> None:
    """Benchmark MCTS and alpha-beta search speed."""
    import time
    from .mcts import MCTS, StatsStore
    from .search import AlphaBeta
    from .utils import MCTSConfig, SearchConfig

    game = _get_game(game_name)
    if show_config:
        print_config(MCTSConfig(iterations=iterations), title="MCTS")
        print_config(SearchConfig(depth=depth), title="Alpha-beta")

    console.print(f"[blue]Benchmarking {game_name}: {moves} moves[/]")

    # MCTS from a fresh store, following its own choices
    mcts = MCTS(game, StatsStore(game=game.spec.name), seed=seed)
    state = game.initial_state()
    total_iterations = 0
    start = time.perf_counter()
    for _ in range(moves):
        if game.is_terminal(state):
            break
        result = mcts.search(state, iterations)
        total_iterations += result.iterations
        state = game.apply_action(state, result.move)
    mcts_elapsed = time.perf_counter() - start

    # Alpha-beta over the same number of moves
    searcher = AlphaBeta(game)
    state = game.initial_state()
    total_nodes = 0
    start = time.perf_counter()
    for _ in range(moves):
        if game.is_terminal(state):
            break
        result = searcher.search(state, depth)
        total_nodes += result.nodes
        state = game.apply_action(state, result.move)
    ab_elapsed = time.perf_counter() - start

    table = Table(title="Results")
    table.add_column("Search", style="cyan")
    table.add_column("Work", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Rate", justify="right", style="green")
    table.add_row(
        "MCTS",
        f"{total_iterations:,} iterations",
        f"{mcts_elapsed:.2f}s",
        f"{total_iterations / max(mcts_elapsed, 1e-9):,.0f}/s",
    )
    table.add_row(
        f"Alpha-beta (depth {depth})",
        f"{total_nodes:,} leaves",
        f"{ab_elapsed:.2f}s",
        f"{total_nodes / max(ab_elapsed, 1e-9):,.0f}/s",
    )
    console.print(table)


if __name__ == "__main__":
    app()
