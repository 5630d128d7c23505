"""Turn a matched word into explicit wikilink syntax."""

from .models import LinkTarget


def link_path(target: LinkTarget) -> str:
    """Path part of the wikilink: document basename plus optional subpath."""
    return f"{target.basename}{target.subpath or ''}"


def materialize(word: str, target: LinkTarget) -> str:
    """Build the replacement text for `word`.

    A word spelled exactly like the target name links to the whole note
    without display text. Anything else keeps the typed word visible:

        Apple  -> [[Apple]]
        Pomme  -> [[Apple]]   (alias of Apple)
        apple  -> [[Apple|apple]]
        Staff  -> [[Business#Staff|Staff]]
    """
    path = link_path(target)
    if word == target.actual_name and target.subpath is None:
        return f"[[{path}]]"
    return f"[[{path}|{word}]]"
