from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Tuple, Union

from .automata import EMPTY, Automaton

EPSILON_LABEL = "ε"


def automaton_to_dot(
    automaton: Automaton,
    *,
    graph_name: str = "Automaton",
    rankdir: str = "LR",
) -> str:
    """Return a Graphviz DOT representation of the automaton."""
    lines: List[str] = [f'digraph "{graph_name}" {{']
    lines.append(f"  rankdir={rankdir};")
    lines.append("  node [shape=circle];")
    if automaton.initial is not None:
        lines.append("  __start__ [shape=point];")
        lines.append(f'  __start__ -> "{automaton.initial}";')

    for name in automaton.nodes:
        shape = "doublecircle" if automaton.is_accepting(name) else "circle"
        lines.append(f'  "{name}" [shape={shape}];')

    for source, target, labels in _collect_edges(automaton):
        label = ", ".join(labels)
        lines.append(f'  "{source}" -> "{target}" [label="{label}"];')

    lines.append("}")
    return "\n".join(lines)


def _collect_edges(automaton: Automaton) -> Iterable[Tuple[str, str, List[str]]]:
    grouped: Dict[Tuple[str, str], List[str]] = {}
    for source, mapping in automaton.transitions().items():
        for symbol, targets in mapping.items():
            label = EPSILON_LABEL if symbol == EMPTY and automaton.kind == "nfa" else symbol
            for target in targets:
                grouped.setdefault((source, target), []).append(label)
    for (source, target), labels in sorted(grouped.items()):
        labels.sort()
        yield source, target, labels


def write_dot(automaton: Automaton, path: Union[str, Path], **kwargs) -> Path:
    """Write the DOT text for `automaton` to `path` and return the resolved path."""
    target = Path(path)
    target.write_text(automaton_to_dot(automaton, **kwargs) + "\n", encoding="utf-8")
    return target.resolve()
