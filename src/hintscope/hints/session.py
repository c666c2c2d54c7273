"""A hinting session for one file."""

from __future__ import annotations

from hintscope.hints.ranking import MAX_HINTS, IdentifierRanking, PropertyRanking, rank_and_filter
from hintscope.index.models import HintToken, ScopeInfo
from hintscope.index.scope import Scope


class HintSession:
    """Holds the latest scope lookup of a file and produces ranked hints.

    The host feeds it every fresh ``ScopeInfo`` from the coordinator; stale
    (cached) lookups carry the same lists and need not be re-set.
    """

    def __init__(self, path: str, *, max_results: int = MAX_HINTS) -> None:
        self.path = path
        self.max_results = max_results
        self.scope: Scope | None = None
        self.identifiers: list[HintToken] = []
        self.properties: list[HintToken] = []
        self.associations: dict[str, dict[str, int]] = {}

    def set_scope_info(self, info: ScopeInfo) -> None:
        self.scope = info.scope
        self.identifiers = info.identifiers
        self.properties = info.properties
        self.associations = info.associations

    def get_hints(
        self,
        offset: int,
        query: str = "",
        *,
        property_lookup: bool = False,
        context: str | None = None,
    ) -> list[HintToken]:
        """Ranked hints at ``offset`` for the token typed so far.

        Args:
            offset: Cursor offset in the file.
            query: Prefix already typed.
            property_lookup: Completing after ``.``.
            context: Object name before the ``.``, when it is a plain name.
        """
        if property_lookup:
            ranking: IdentifierRanking | PropertyRanking = PropertyRanking.for_context(
                self.associations, context, self.path
            )
            candidates = self.properties
        else:
            ranking = IdentifierRanking(self.scope)
            candidates = self.identifiers
        return rank_and_filter(candidates, ranking, offset, query, limit=self.max_results)
