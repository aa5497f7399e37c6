# sewpager/core/error_codes.py
"""
Structured error codes for per-piece and run failures.
Use these keys in result records; map to user-facing messages in the CLI.
"""

from __future__ import annotations

# Known error keys (recorded in PieceSet.errors / LayoutResult.errors)
DEGENERATE_PATH = "degenerate_path"
OFFSET_EMPTY = "offset_empty"
PIECE_TOO_LARGE = "piece_too_large"
NO_PIECES = "no_pieces"

# User-facing messages (short, actionable)
USER_MESSAGES: dict[str, str] = {
    DEGENERATE_PATH: "Outline has fewer than three distinct points; the piece was skipped.",
    OFFSET_EMPTY: "Seam allowance could not be generated; the piece is printed without it.",
    PIECE_TOO_LARGE: "Piece does not fit on the printable area. Try a larger paper or landscape orientation.",
    NO_PIECES: "No pattern pieces were found. Check that outlines carry the 'seam' class.",
}


def user_message(error_key: str | None, fallback: str = "Something went wrong.") -> str:
    """Return a user-facing message for the given error key."""
    if not error_key:
        return fallback
    return USER_MESSAGES.get(error_key, fallback)


class PatternError(ValueError):
    """Base class for failures that carry an error key."""
    kind: str = ""


class DegeneratePathError(PatternError):
    """Importer produced fewer than three points."""
    kind = DEGENERATE_PATH


class OffsetEmptyError(PatternError):
    """Offset engine returned no polygon."""
    kind = OFFSET_EMPTY


class NoPiecesError(PatternError):
    """Input contained zero valid outlines. errors holds the per-piece failures seen."""
    kind = NO_PIECES

    def __init__(self, message: str, errors: list | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class UnplacedPiecesError(PatternError):
    """Raised by the page assembler when some pieces could not be placed."""
    kind = PIECE_TOO_LARGE

    def __init__(self, message: str, piece_ids: list[str] | None = None) -> None:
        super().__init__(message)
        self.piece_ids = list(piece_ids or [])
