"""Data models for Kagi Search API responses.

Mirrors the JSON body of ``GET /api/v0/search``::

    {
        "meta": {"id": ..., "node": ..., "ms": ..., "api_balance": ...},
        "data": [{"t": 0, "url": ..., "title": ..., "snippet": ...}, ...],
        "error": [{"code": ..., "msg": ...}]
    }
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Result type tags ("t" field)
RESULT_ORGANIC = 0   # Ranked page match
RESULT_RELATED = 1   # Related searches suggestion


@dataclass
class KagiThumbnail:
    """Thumbnail attached to a search result."""
    url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KagiThumbnail':
        return cls(
            url=data.get("url"),
            width=data.get("width"),
            height=data.get("height"),
        )


@dataclass
class KagiResult:
    """One entry of the ``data`` list."""
    t: Optional[int] = None
    url: Optional[str] = None
    title: Optional[str] = None
    snippet: Optional[str] = None
    published: Optional[str] = None
    thumbnail: Optional[KagiThumbnail] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KagiResult':
        thumbnail = data.get("thumbnail")
        return cls(
            t=data.get("t"),
            url=data.get("url"),
            title=data.get("title"),
            snippet=data.get("snippet"),
            published=data.get("published"),
            thumbnail=KagiThumbnail.from_dict(thumbnail) if isinstance(thumbnail, dict) else None,
        )

    @property
    def is_organic(self) -> bool:
        """True for ranked page matches that carry a URL."""
        return self.t == RESULT_ORGANIC and bool(self.url)

    def to_markdown(self, ordinal: int) -> str:
        """Format this result as a numbered entry for the model."""
        title = self.title if self.title is not None else "Untitled"
        entry = f"{ordinal}. **{title}**\n   {self.url}"
        if self.snippet:
            entry += f"\n   {self.snippet}"
        if self.published:
            entry += f"\n   Published: {self.published}"
        return entry


@dataclass
class KagiMeta:
    """Response metadata."""
    id: Optional[str] = None
    node: Optional[str] = None
    ms: int = 0
    api_balance: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KagiMeta':
        return cls(
            id=data.get("id"),
            node=data.get("node"),
            ms=data.get("ms") or 0,
            api_balance=float(data.get("api_balance") or 0.0),
        )


@dataclass
class KagiError:
    """An entry of the ``error`` list."""
    code: Optional[int] = None
    msg: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KagiError':
        return cls(code=data.get("code"), msg=str(data.get("msg", "")))


@dataclass
class KagiResponse:
    """Parsed search response."""
    meta: KagiMeta = field(default_factory=KagiMeta)
    data: List[KagiResult] = field(default_factory=list)
    error: List[KagiError] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KagiResponse':
        """Parse a decoded JSON body.

        Raises:
            ValueError: If the body is not a JSON object.
        """
        if not isinstance(data, dict):
            raise ValueError(f"unexpected response body of type {type(data).__name__}")

        return cls(
            meta=KagiMeta.from_dict(data.get("meta") or {}),
            data=[KagiResult.from_dict(r) for r in data.get("data") or []],
            error=[KagiError.from_dict(e) for e in data.get("error") or []],
        )

    @property
    def error_message(self) -> Optional[str]:
        """All API error messages joined with '; ', or None if there are none."""
        if not self.error:
            return None
        return "; ".join(e.msg for e in self.error)

    def organic_results(self) -> List[KagiResult]:
        """Organic results with a URL, in response order."""
        return [r for r in self.data if r.is_organic]
