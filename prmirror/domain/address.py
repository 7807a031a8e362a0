"""Virtual document addresses.

An Address names one side of one changed file in one pull request. Encoded
addresses look like ``pr:/src/app.py?{...}``: the path part keeps the file
extension visible to editors, the query carries every field as JSON with sorted
keys, so the same address always encodes to the same token.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from urllib.parse import quote, unquote

from prmirror.domain.change import ChangeStatus
from prmirror.domain.diff import Side

SCHEME = "pr"

_FIELD_TYPES = {
    "baseCommit": str,
    "fileName": str,
    "headCommit": str,
    "isBase": bool,
    "prNumber": int,
    "status": str,
}


@dataclass(frozen=True)
class Address:
    """Identity of a reconstructed document."""

    file_name: str
    is_base: bool
    base_commit: str
    head_commit: str
    status: ChangeStatus
    pr_number: int

    @classmethod
    def for_side(
        cls,
        side: Side,
        file_name: str,
        base_commit: str,
        head_commit: str,
        status: ChangeStatus,
        pr_number: int,
    ) -> Address:
        return cls(
            file_name=file_name,
            is_base=side.is_base,
            base_commit=base_commit,
            head_commit=head_commit,
            status=status,
            pr_number=pr_number,
        )

    @property
    def side(self) -> Side:
        return Side.from_is_base(self.is_base)

    @property
    def commit(self) -> str:
        """Commit whose content this document shows."""
        return self.base_commit if self.is_base else self.head_commit

    def encode(self) -> str:
        return encode(self)


def encode(address: Address) -> str:
    """Encode an address into a stable token."""
    params = {
        "baseCommit": address.base_commit,
        "fileName": address.file_name,
        "headCommit": address.head_commit,
        "isBase": address.is_base,
        "prNumber": address.pr_number,
        "status": address.status.value,
    }
    query = json.dumps(params, sort_keys=True, separators=(",", ":"))
    return f"{SCHEME}:/{quote(address.file_name, safe='/')}?{quote(query, safe='')}"


def decode(token: str) -> Address | None:
    """Decode a token produced by encode().

    Returns:
        The Address, or None if the token is malformed in any way
    """
    if not isinstance(token, str) or not token.startswith(f"{SCHEME}:/"):
        return None

    path, separator, query = token[len(SCHEME) + 2 :].partition("?")
    if not separator:
        return None

    try:
        params = json.loads(unquote(query))
    except (ValueError, RecursionError):
        return None
    if not isinstance(params, dict) or set(params) != set(_FIELD_TYPES):
        return None

    for key, expected in _FIELD_TYPES.items():
        value = params[key]
        # bool is a subclass of int
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            return None

    if unquote(path) != params["fileName"]:
        return None

    try:
        status = ChangeStatus(params["status"])
    except ValueError:
        return None

    return Address(
        file_name=params["fileName"],
        is_base=params["isBase"],
        base_commit=params["baseCommit"],
        head_commit=params["headCommit"],
        status=status,
        pr_number=params["prNumber"],
    )
