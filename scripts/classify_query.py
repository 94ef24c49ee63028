#!/usr/bin/env python3
"""
Query Classification Script
Show how the configured rules classify a question
"""

import sys
from pathlib import Path
import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from kgqa import KGQAError, Language, QueryClassifier, Rules, load_config
from kgqa.log import setup_logging

console = Console()


@click.command()
@click.option(
    "--query",
    "-q",
    prompt="Enter your question",
    help="Natural-language question",
)
@click.option(
    "--language",
    "-l",
    default=None,
    help="Language key (detected from the query type rules when omitted)",
)
@click.option(
    "--config-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML configuration tree (defaults to CONFIG_FILE / reference.yaml)",
)
@click.option(
    "--log-level",
    default="WARNING",
    help="Log level",
)
def main(query: str, language: str, config_file: str, log_level: str):
    """
    Classify a question and print its query plan
    """
    setup_logging(log_level)
    console.print("\n[bold cyan]🔍 Query Classifier[/bold cyan]\n")

    try:
        rules = Rules(load_config(config_file))
        classifier = QueryClassifier(rules)
        lang = Language.from_key(language) if language else classifier.detect_language(query)
        analysis = classifier.analyze(query, lang)
    except KGQAError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    console.print(Panel(query, title=f"Query ({lang.value})", border_style="cyan"))

    summary = Table(show_header=False)
    summary.add_column("Field", style="cyan")
    summary.add_column("Value", style="white")
    summary.add_row("Query type", analysis.query_type.value if analysis.query_type else "[yellow]unknown[/yellow]")
    summary.add_row("Clean query", analysis.clean_query)
    summary.add_row("Abstraction", analysis.abstraction)
    summary.add_row("Plan", analysis.plan.plan_id if analysis.plan else "[yellow]none[/yellow]")
    console.print(summary)

    if analysis.bindings:
        bindings = Table(title="Bindings")
        bindings.add_column("Placeholder", style="magenta")
        bindings.add_column("Term", style="white")
        for placeholder, term in analysis.bindings:
            bindings.add_row(placeholder, term)
        console.print(bindings)

    if analysis.triples:
        triples = Table(title="Triples")
        triples.add_column("Subject", style="green")
        triples.add_column("Predicate", style="cyan")
        triples.add_column("Object", style="green")
        for s, p, o in analysis.triples:
            triples.add_row(s, p, o)
        console.print(triples)

    console.print("\n[bold green]✅ Classification completed![/bold green]\n")


if __name__ == "__main__":
    main()
