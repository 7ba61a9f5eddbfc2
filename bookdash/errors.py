"""Error types for record assembly and editing."""


class SourceUnavailable(Exception):
    """The primary search fetch failed; no collection can be assembled."""


class EnrichmentUnavailable(Exception):
    """An author sub-fetch failed; the record falls back to sentinel values."""

    def __init__(self, author_key: str, resource: str):
        self.author_key = author_key
        self.resource = resource
        super().__init__(f"{resource} unavailable for author {author_key}")


class EditTargetMissing(Exception):
    """No record in the collection matches the key of a saved edit."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"No record with key {key!r}")
