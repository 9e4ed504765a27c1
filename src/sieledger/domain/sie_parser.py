"""SIE4 file parser.

Turns the text of a SIE file into a :class:`SieDocument`. Parsing is
line-oriented and best effort: a line that cannot be handled is skipped and
reported as a :class:`ParseWarning`, the rest of the file is still read.

Only the tags needed for import are interpreted::

    #PROGRAM "Fortnox" 3.1
    #RAR 0 20240101 20241231
    #KONTO 1930 "Företagskonto"
    #IB 0 1930 50000.00
    #VER A 1 20240115 "Hyra"
    {
        #TRANS 5010 {} 10000.00
        #TRANS 1930 {} -10000.00
    }

Every other tag is ignored.
"""

from typing import Optional

from sieledger.config.logging import get_logger
from sieledger.domain.entities import (
    FiscalYear,
    ParseWarning,
    SieAccount,
    SieBalance,
    SieDocument,
    SieVerification,
    VerificationRow,
)
from sieledger.utils.amount_parser import parse_amount
from sieledger.utils.date_parser import parse_sie_strict

logger = get_logger(__name__)


def decode_sie_bytes(raw: bytes) -> str:
    """Decode an uploaded SIE file.

    SIE files are traditionally PC8 (CP437) encoded, but many programs write
    UTF-8 today. UTF-8 is tried first since CP437 accepts any byte sequence.
    """
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("cp437")


def tokenize_line(line: str) -> list[str]:
    """Split a SIE line into tokens.

    Tokens are separated by whitespace. A double quote toggles quoted mode, in
    which whitespace is part of the token. Quote characters are kept in the
    token; escaped quotes are not supported.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
            current.append(char)
        elif char.isspace() and not in_quotes:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append("".join(current))
    return tokens


def _unquote(token: str) -> str:
    return token.replace('"', "")


def _field(tokens: list[str], index: int) -> str:
    if index >= len(tokens):
        raise ValueError(f"{tokens[0]} is missing field {index}")
    return tokens[index]


def _parse_int(value: str) -> int:
    try:
        return int(_unquote(value))
    except ValueError:
        raise ValueError(f"Expected an integer, got '{value}'")


def parse_sie(content: str) -> SieDocument:
    """Parse SIE text into a document.

    Never raises for malformed content. Lines that fail are listed in
    ``document.warnings`` with their 1-based line number.

    #TRANS lines attach to the most recent #VER in file order. A #TRANS
    before any #VER is ignored.
    """
    document = SieDocument()
    current_verification: Optional[SieVerification] = None

    for line_number, raw_line in enumerate(content.splitlines(), start=1):
        line = raw_line.strip()
        if not line.startswith("#"):
            continue

        tokens = tokenize_line(line)
        tag = tokens[0].upper()

        try:
            if tag == "#PROGRAM":
                document.program = _unquote(_field(tokens, 1))

            elif tag == "#RAR":
                document.fiscal_years.append(
                    FiscalYear(
                        start=parse_sie_strict(_field(tokens, 2)),
                        end=parse_sie_strict(_field(tokens, 3)),
                    )
                )

            elif tag == "#KONTO":
                document.accounts.append(
                    SieAccount(
                        number=_unquote(_field(tokens, 1)),
                        name=_unquote(_field(tokens, 2)),
                    )
                )

            elif tag in ("#IB", "#UB"):
                document.balances.append(
                    SieBalance(
                        account=_unquote(_field(tokens, 2)),
                        amount=parse_amount(_field(tokens, 3)),
                        year=_parse_int(_field(tokens, 1)),
                        kind=tag[1:],
                    )
                )

            elif tag == "#VER":
                # A broken #VER must not let its rows fall into the previous one
                current_verification = None
                current_verification = SieVerification(
                    series=_unquote(_field(tokens, 1)),
                    ver_number=_unquote(_field(tokens, 2)),
                    date=_unquote(_field(tokens, 3)),
                    description=_unquote(tokens[4]) if len(tokens) > 4 else "",
                )
                document.verifications.append(current_verification)

            elif tag == "#TRANS":
                if current_verification is None:
                    continue
                current_verification.rows.append(
                    VerificationRow(
                        account=_unquote(_field(tokens, 1)),
                        amount=parse_amount(_field(tokens, 3)),
                    )
                )

        except ValueError as e:
            logger.warning(
                "sie_line_skipped",
                line_number=line_number,
                line=line,
                reason=str(e),
            )
            document.warnings.append(
                ParseWarning(line_number=line_number, raw_line=raw_line, reason=str(e))
            )

    return document
