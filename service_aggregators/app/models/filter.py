"""
Metric selection filters for aggregators.

A filter decides whether an aggregator should see a metric and narrows
the fields and tags it sees. Patterns are shell-style globs.
"""

from fnmatch import fnmatchcase
from typing import Any, Dict, List, Protocol

from pydantic import BaseModel, Field


class MetricFilter(Protocol):
    """Capability consumed by the router."""

    def is_active(self) -> bool:
        ...

    def apply(self, name: str, fields: Dict[str, Any], tags: Dict[str, str]) -> bool:
        ...


def _match_any(patterns: List[str], value: str) -> bool:
    return any(fnmatchcase(value, pattern) for pattern in patterns)


class TagFilter(BaseModel):
    """Glob patterns applied to the value of one tag."""
    name: str
    filter: List[str] = Field(default_factory=list)

    def matches(self, tags: Dict[str, str]) -> bool:
        value = tags.get(self.name)
        return value is not None and _match_any(self.filter, value)


class Filter(BaseModel):
    """Name, field and tag based metric filter.

    ``apply`` mutates the ``fields`` and ``tags`` mappings it is given:
    fields failing ``fieldpass``/``fielddrop`` and tags failing
    ``taginclude``/``tagexclude`` are removed. Callers that need the
    originals must pass copies.
    """

    namepass: List[str] = Field(default_factory=list)
    namedrop: List[str] = Field(default_factory=list)
    fieldpass: List[str] = Field(default_factory=list)
    fielddrop: List[str] = Field(default_factory=list)
    tagpass: List[TagFilter] = Field(default_factory=list)
    tagdrop: List[TagFilter] = Field(default_factory=list)
    taginclude: List[str] = Field(default_factory=list)
    tagexclude: List[str] = Field(default_factory=list)

    def is_active(self) -> bool:
        return any((
            self.namepass, self.namedrop,
            self.fieldpass, self.fielddrop,
            self.tagpass, self.tagdrop,
            self.taginclude, self.tagexclude,
        ))

    def apply(self, name: str, fields: Dict[str, Any], tags: Dict[str, str]) -> bool:
        """Return True if the metric passes; narrows fields and tags in place."""
        if not self.is_active():
            return True

        if not self._should_name_pass(name):
            return False

        if not self._should_tags_pass(tags):
            return False

        for key in list(fields):
            if not self._should_field_pass(key):
                del fields[key]
        if not fields:
            return False

        self._filter_tags(tags)
        return True

    def _should_name_pass(self, name: str) -> bool:
        if self.namepass and not _match_any(self.namepass, name):
            return False
        if self.namedrop and _match_any(self.namedrop, name):
            return False
        return True

    def _should_field_pass(self, key: str) -> bool:
        if self.fieldpass and not _match_any(self.fieldpass, key):
            return False
        if self.fielddrop and _match_any(self.fielddrop, key):
            return False
        return True

    def _should_tags_pass(self, tags: Dict[str, str]) -> bool:
        if self.tagpass and not any(tf.matches(tags) for tf in self.tagpass):
            return False
        if self.tagdrop and any(tf.matches(tags) for tf in self.tagdrop):
            return False
        return True

    def _filter_tags(self, tags: Dict[str, str]) -> None:
        for key in list(tags):
            if self.taginclude and not _match_any(self.taginclude, key):
                del tags[key]
            elif self.tagexclude and _match_any(self.tagexclude, key):
                del tags[key]
