"""
Bracket notation utilities and the WUSS → constraint converter.

Two alphabets are in play:

- WUSS (Rfam/Infernal SS_cons): nested pairs drawn with ``<>``, ``()``,
  ``[]`` and ``{}``; pseudoknots drawn with an upper-case letter on the 5'
  side and the matching lower-case letter on the 3' side; everything else
  (``:,_-~.``) is unpaired.
- Layered bracket notation (folding backends, consensus structures): each
  non-crossing layer gets its own class, ``()`` then ``[]``, ``{}``, ``<>``
  and ``a``/``A``, ``b``/``B``, ...

Key functions:
- wuss_to_bracket(annotation): WUSS track → plain ``(``/``)``/``.`` constraint
- parse_pairs(structure): strict parser for layered bracket strings
- pairs_to_structure(pairs, length): pairs → layered bracket string
"""

from __future__ import annotations

from .errors import MalformedAnnotationError

__all__ = [
    "OPEN_TO_CLOSE",
    "CLOSE_TO_OPEN",
    "crosses",
    "pairs_to_layers",
    "parse_pairs",
    "pairs_to_structure",
    "partner_table",
    "wuss_pairs",
    "wuss_to_bracket",
]

# Layered bracket alphabet, in layer order
OPEN_TO_CLOSE = {
    "(": ")",
    "[": "]",
    "{": "}",
    "<": ">",
}
# Add a-z -> A-Z
for _i in range(26):
    OPEN_TO_CLOSE[chr(ord("a") + _i)] = chr(ord("A") + _i)

CLOSE_TO_OPEN = {v: k for k, v in OPEN_TO_CLOSE.items()}

LAYER_BRACKETS = list(OPEN_TO_CLOSE.items())

# WUSS: nested classes collapse into one bracket pair
WUSS_NESTED = {"<": ">", "(": ")", "[": "]", "{": "}"}
WUSS_NESTED_CLOSE = {v: k for k, v in WUSS_NESTED.items()}

# WUSS pseudoknots: A..Z open, a..z close
WUSS_PSEUDOKNOT = {chr(ord("A") + i): chr(ord("a") + i) for i in range(26)}
WUSS_PSEUDOKNOT_CLOSE = {v: k for k, v in WUSS_PSEUDOKNOT.items()}


def crosses(p1: tuple[int, int], p2: tuple[int, int]) -> bool:
    """Check if two base pairs cross (form a pseudoknot).

    Two pairs (i, j) and (k, l) cross if and only if:
        i < k < j < l  OR  k < i < l < j
    """
    i, j = p1
    k, l = p2

    # Normalize so i < j and k < l
    if i > j:
        i, j = j, i
    if k > l:
        k, l = l, k

    return (i < k < j < l) or (k < i < l < j)


def pairs_to_layers(pairs) -> list[list[tuple[int, int]]]:
    """Partition pairs into non-crossing layers.

    Pairs are visited in 5' order and dropped into the first layer they do
    not cross, so layer 0 is the largest-first nested backbone.

    Args:
        pairs: Iterable of (i, j) base pairs

    Returns:
        List of layers, each a list of mutually non-crossing pairs
    """
    layers: list[list[tuple[int, int]]] = []

    for p in sorted(pairs):
        for layer in layers:
            if not any(crosses(p, q) for q in layer):
                layer.append(p)
                break
        else:
            layers.append([p])

    return layers


def _collect_pairs(
    struct: str,
    opens: dict[str, str],
    closes: dict[str, str],
    what: str,
) -> dict[str, list[tuple[int, int]]]:
    """Stack-match brackets per class; raise on any imbalance."""
    stacks: dict[str, list[int]] = {op: [] for op in opens}
    pairs: dict[str, list[tuple[int, int]]] = {op: [] for op in opens}

    for idx, ch in enumerate(struct):
        if ch in opens:
            stacks[ch].append(idx)
        elif ch in closes:
            op = closes[ch]
            if not stacks[op]:
                raise MalformedAnnotationError(
                    f"Unmatched closing '{ch}' at column {idx} in {what}"
                )
            pairs[op].append((stacks[op].pop(), idx))

    for op, stack in stacks.items():
        if stack:
            raise MalformedAnnotationError(
                f"Unmatched opening '{op}' at column(s) {stack} in {what}"
            )

    return pairs


def parse_pairs(struct: str) -> list[tuple[int, int]]:
    """Parse a layered dot-bracket string into base pairs.

    Args:
        struct: Dot-bracket string (may include pseudoknot brackets)

    Returns:
        Sorted list of (i, j) pairs with i < j

    Raises:
        MalformedAnnotationError: unbalanced brackets or unknown characters
    """
    for idx, ch in enumerate(struct):
        if ch != "." and ch not in OPEN_TO_CLOSE and ch not in CLOSE_TO_OPEN:
            raise MalformedAnnotationError(
                f"Unexpected character '{ch}' at column {idx} in structure"
            )

    by_class = _collect_pairs(struct, OPEN_TO_CLOSE, CLOSE_TO_OPEN, "structure")
    return sorted(p for class_pairs in by_class.values() for p in class_pairs)


def pairs_to_structure(pairs, length: int) -> str:
    """Convert pairs to a layered dot-bracket string.

    Layer 0 -> '()', then '[]', '{}', '<>', 'aA', 'bB', ...

    Raises:
        ValueError: a position appears in more than one pair, or lies
            outside ``range(length)``
    """
    pairs = list(pairs)
    indices = [idx for pair in pairs for idx in pair]
    if len(indices) != len(set(indices)):
        raise ValueError("Invalid matching: overlapping pairs detected in structure.")
    if any(idx < 0 or idx >= length for idx in indices):
        raise ValueError(f"Pair index out of range for length {length}")

    chars = ["."] * length
    layers = pairs_to_layers(pairs)
    if len(layers) > len(LAYER_BRACKETS):
        raise ValueError(f"Too many pseudoknot layers ({len(layers)}) to encode")

    for layer_idx, layer in enumerate(layers):
        open_ch, close_ch = LAYER_BRACKETS[layer_idx]
        for i, j in layer:
            if i > j:
                i, j = j, i
            chars[i] = open_ch
            chars[j] = close_ch

    return "".join(chars)


def partner_table(struct: str) -> list[int]:
    """Return partners[i] = j for paired columns, -1 for unpaired ones."""
    partners = [-1] * len(struct)
    for i, j in parse_pairs(struct):
        partners[i] = j
        partners[j] = i
    return partners


def wuss_pairs(annotation: str, pseudoknots: bool = False) -> list[tuple[int, int]]:
    """Validate a WUSS annotation and return its base pairs.

    Nested glyph classes are matched per class and must jointly form a
    non-crossing structure. Pseudoknot letters are matched per letter and
    only returned when ``pseudoknots`` is set.

    Raises:
        MalformedAnnotationError: unbalanced brackets, a close without an
            open of its class, or crossing nested-class pairs
    """
    nested_by_class = _collect_pairs(
        annotation, WUSS_NESTED, WUSS_NESTED_CLOSE, "WUSS annotation"
    )
    nested = sorted(p for class_pairs in nested_by_class.values() for p in class_pairs)

    # Collapsing all classes onto '()' only keeps partners if nothing crosses
    partner = {}
    for i, j in nested:
        partner[i] = j
        partner[j] = i
    stack: list[int] = []
    for idx in sorted(partner):
        if partner[idx] > idx:
            stack.append(idx)
        elif stack[-1] != partner[idx]:
            raise MalformedAnnotationError(
                f"Crossing bracket classes at column {idx} in WUSS annotation"
            )
        else:
            stack.pop()

    knots_by_class = _collect_pairs(
        annotation, WUSS_PSEUDOKNOT, WUSS_PSEUDOKNOT_CLOSE, "WUSS annotation"
    )
    if not pseudoknots:
        return nested

    knots = [p for class_pairs in knots_by_class.values() for p in class_pairs]
    return sorted(nested + knots)


def wuss_to_bracket(annotation: str, pseudoknots: bool = False) -> str:
    """Convert a WUSS consensus annotation into a folding constraint.

    Every nested paired glyph becomes '(' or ')' with its partner kept;
    every other glyph becomes '.'. With ``pseudoknots`` the WUSS letter
    pairs are kept as well and the result uses the layered alphabet
    (pseudoknotted pairs land in '[]', '{}', ...).

    Example:
        wuss_to_bracket("<<<__>>>,,AA::aa")  ->  "(((..)))........"
    """
    pairs = wuss_pairs(annotation, pseudoknots=pseudoknots)
    return pairs_to_structure(pairs, len(annotation))
