#!/usr/bin/env python3
"""
Knowledge Base Search Script
Run one search strategy against the configured backend
"""

import sys
from pathlib import Path
import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import settings
from kgqa import Core, EntitySearcher, KGQAError, ParamsBuilder, SearchParams, load_config
from kgqa.log import setup_logging

console = Console()

RANKERS = {
    "levenshtein": ParamsBuilder.levenshtein,
    "jaccard": ParamsBuilder.jaccard,
    "jaro_winkler": ParamsBuilder.jaro_winkler,
    "distributional": ParamsBuilder.distributional,
}


@click.command()
@click.option("--kb", "kb_name", required=True, help="Knowledge base name (kb.<name> in the config)")
@click.option(
    "--strategy",
    type=click.Choice(["class", "instance", "property", "pivoted", "ids"]),
    default="instance",
    help="Search strategy",
)
@click.option("--term", "-t", default=None, help="Search term")
@click.option("--pivot", default=None, help="Pivot entity id (pivoted search)")
@click.option("--ids", default=None, help="Comma separated entity ids (ids lookup)")
@click.option(
    "--ranker",
    type=click.Choice(sorted(RANKERS)),
    default="levenshtein",
    help="Ranking strategy",
)
@click.option("--threshold", default=0.0, help="Minimum rank score")
@click.option("--limit", default=None, type=int, help="Maximum backend hits")
@click.option(
    "--config-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML configuration tree (defaults to CONFIG_FILE / reference.yaml)",
)
def main(kb_name, strategy, term, pivot, ids, ranker, threshold, limit, config_file):
    """
    Search a knowledge base and print the ranked results
    """
    setup_logging()
    console.print("\n[bold cyan]🔍 KB Search[/bold cyan]\n")
    console.print(f"Backend: {settings.SEARCH_BACKEND_URL}")

    if strategy == "ids" and not ids:
        raise click.UsageError("--ids is required for the ids lookup")
    if strategy != "ids" and not term:
        raise click.UsageError("--term is required for this strategy")
    if strategy == "pivoted" and not pivot:
        raise click.UsageError("--pivot is required for pivoted search")

    try:
        core = Core(load_config(config_file))
        searcher = EntitySearcher(core)

        if strategy == "ids":
            entities = searcher.get_entities(kb_name, [i.strip() for i in ids.split(",") if i.strip()])
            results = [(entity, None) for entity in entities]
        else:
            search_params = SearchParams(kb_name, term, limit=limit)
            rank_params = RANKERS[ranker](threshold=threshold)

            if strategy == "pivoted":
                pivot_entity = searcher.get_entity(kb_name, pivot)
                if pivot_entity is None:
                    console.print(f"[red]Pivot '{pivot}' not found![/red]")
                    sys.exit(1)
                scores = searcher.pivoted_search(pivot_entity, search_params, rank_params)
            else:
                scores = getattr(searcher, f"{strategy}_search")(search_params, rank_params)
            results = [(score.entry, score.value) for score in scores]

    except KGQAError as e:
        console.print(f"[red]✗ {type(e).__name__}: {e}[/red]")
        sys.exit(1)

    console.print(Panel(term or ids, title=f"{strategy} search on {kb_name}", border_style="cyan"))

    if not results:
        console.print("[yellow]No results found[/yellow]")
        return

    table = Table()
    table.add_column("#", style="dim")
    table.add_column("Id", style="cyan")
    table.add_column("Value", style="white")
    table.add_column("Score", style="green")

    for idx, (entry, value) in enumerate(results, 1):
        table.add_row(
            str(idx),
            getattr(entry, "id", ""),
            str(entry),
            "" if value is None else f"{value:.3f}",
        )

    console.print(table)
    console.print(f"\n[bold green]✅ {len(results)} results[/bold green]\n")


if __name__ == "__main__":
    main()
