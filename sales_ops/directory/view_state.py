# sales_ops/directory/view_state.py
"""
List View State Transitions

Each list page keeps one ListViewState in the session. Widgets emit
events; reduce() turns (state, event) into the next state and
needs_fetch() decides whether the gateway must be queried again.

Changing the search term, status filter, sort or page size resets the
page to 1.
"""

from dataclasses import dataclass, replace
from typing import MutableMapping, Optional, Tuple, Union

from .constants import DEFAULT_PAGE_SIZE
from .list_query import ListQuery


@dataclass(frozen=True)
class ListViewState:
    sort_field: str
    sort_dir: str = 'asc'
    search: str = ''
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    status: str = 'all'

    def to_query(self) -> ListQuery:
        return ListQuery(
            sort_field=self.sort_field,
            sort_dir=self.sort_dir,
            search=self.search,
            page=self.page,
            page_size=self.page_size,
            status=self.status,
        )


# =============================================================================
# EVENTS
# =============================================================================

@dataclass(frozen=True)
class SearchChanged:
    term: str


@dataclass(frozen=True)
class SortRequested:
    """Header click: same field toggles direction, a new field sorts ascending."""
    field: str


@dataclass(frozen=True)
class PageRequested:
    page: int


@dataclass(frozen=True)
class PageSizeChanged:
    page_size: int


@dataclass(frozen=True)
class StatusChanged:
    status: str


ListEvent = Union[SearchChanged, SortRequested, PageRequested, PageSizeChanged, StatusChanged]


# =============================================================================
# REDUCER
# =============================================================================

def reduce(state: ListViewState, event: ListEvent) -> ListViewState:
    """Return the state after applying one event."""
    if isinstance(event, SearchChanged):
        term = event.term or ''
        if term == state.search:
            return state
        return replace(state, search=term, page=1)

    if isinstance(event, SortRequested):
        if event.field == state.sort_field:
            sort_dir = 'desc' if state.sort_dir == 'asc' else 'asc'
            return replace(state, sort_dir=sort_dir, page=1)
        return replace(state, sort_field=event.field, sort_dir='asc', page=1)

    if isinstance(event, PageRequested):
        return replace(state, page=max(1, int(event.page)))

    if isinstance(event, PageSizeChanged):
        if event.page_size == state.page_size:
            return state
        return replace(state, page_size=event.page_size, page=1)

    if isinstance(event, StatusChanged):
        if event.status == state.status:
            return state
        return replace(state, status=event.status, page=1)

    raise TypeError(f"Unknown list event: {event!r}")


def needs_fetch(old: Optional[ListViewState], new: ListViewState) -> bool:
    """True when the query parameters changed (or nothing was fetched yet)."""
    if old is None:
        return True
    return old.to_query() != new.to_query()


# Per-view session keys kept between reruns
KEPT_PAGE_SUFFIXES = ('page_result', 'fetched_state', 'export')


def kept_page_keys(view: str) -> Tuple[str, ...]:
    return tuple(f"{view}_{suffix}" for suffix in KEPT_PAGE_SUFFIXES)


def drop_kept_pages(store: MutableMapping, views: Tuple[str, ...] = ('agents', 'customers')) -> None:
    """Forget kept results so every list view refetches on its next run."""
    for view in views:
        for key in kept_page_keys(view):
            store.pop(key, None)


__all__ = [
    'ListViewState',
    'SearchChanged',
    'SortRequested',
    'PageRequested',
    'PageSizeChanged',
    'StatusChanged',
    'reduce',
    'needs_fetch',
    'kept_page_keys',
    'drop_kept_pages',
]
