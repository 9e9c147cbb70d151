#!/usr/bin/env python3
"""
Original Manuscripts - Developer CLI

Command-line access to the reader core for checking data and behaviour
without a rendering layer.

Features:
- Greek transliteration
- Verse lookup with per-word transliteration
- Pronunciation scoring of a transcript against a verse
- Inspection of stored practice records
"""

from pathlib import Path
from typing import Optional

import click
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from manuscripts import __version__
from manuscripts.corpus import VerseCorpus, display_name
from manuscripts.errors import CorpusError
from manuscripts.practice.matcher import score_words
from manuscripts.practice.store import PracticeStore
from manuscripts.readalong.tokenizer import normalize_words, tokenize
from manuscripts.transliterate import transliterate, transliterate_words
from manuscripts.utils import logger
from manuscripts.utils.config import config


def _load_corpus(path: Optional[str]) -> VerseCorpus:
    corpus_path = Path(path) if path else config.corpus_path
    try:
        return VerseCorpus.load_csv(corpus_path)
    except CorpusError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    Original Manuscripts

    Parallel Greek/English verses with transliteration, read-along
    and pronunciation practice.
    """
    pass


@cli.command("transliterate")
@click.argument("text")
def transliterate_command(text: str):
    """Print the Latin pronunciation of Greek TEXT."""
    click.echo(transliterate(text))


@cli.command()
@click.argument("book")
@click.argument("chapter", type=int)
@click.argument("verse", type=int)
@click.option(
    "--corpus",
    type=click.Path(),
    default=None,
    help=f"Aligned verse CSV (default: {config.corpus_path})",
)
def show(book: str, chapter: int, verse: int, corpus: Optional[str]):
    """Show a verse in both languages with Greek pronunciation."""
    verses = _load_corpus(corpus)
    index = verses.index_of(book, chapter, verse)
    if index is None:
        raise click.ClickException(f"{display_name(book)} {chapter}:{verse} not found")

    found = verses[index]
    logger.header(escape(found.reference))
    logger.console.print(found.text, markup=False)
    logger.console.print()

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Greek")
    table.add_column("Pronunciation", style="highlight")
    for position, (word, latin) in enumerate(transliterate_words(found.greek_text)):
        table.add_row(str(position), Text(word), Text(latin))
    logger.console.print(table)


@cli.command()
@click.argument("target")
@click.argument("transcript")
def score(target: str, transcript: str):
    """
    Score a spoken TRANSCRIPT against TARGET text.

    Uses the same strict word-by-word matching as live practice.
    """
    targets = normalize_words(target)
    results, _ = score_words(targets, normalize_words(transcript))

    for position, word in enumerate(tokenize(target)):
        if position not in results:
            logger.console.print(f"  [dim]·[/dim] {escape(word)}")
        elif results[position]:
            logger.success(escape(word))
        else:
            logger.error(escape(word))

    correct = sum(1 for ok in results.values() if ok)
    logger.info(f"{correct}/{len(targets)} words correct")


@cli.command("practice-records")
@click.option(
    "--store",
    type=click.Path(),
    default=None,
    help=f"Practice record file (default: {config.practice_store_path})",
)
def practice_records(store: Optional[str]):
    """List stored practice records."""
    practice_store = PracticeStore.open(Path(store) if store else config.practice_store_path)
    records = list(practice_store.records())
    if not records:
        logger.info("No practice records")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Verse")
    table.add_column("Correct", justify="right")
    table.add_column("Attempted", justify="right")
    for key, results in records:
        correct = sum(1 for ok in results.values() if ok)
        table.add_row(Text(key), str(correct), str(len(results)))
    logger.console.print(table)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
