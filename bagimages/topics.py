import re

from typing import Iterable, List, Optional

from bagimages.config import EXTRACT_CONFIG
from bagimages.errors import ConfigurationError


class TopicSelector:
    plain: str
    pattern: Optional[re.Pattern]

    def __init__(self, plain: str, regex: bool = False):
        self.plain = plain

        if regex:
            try:
                self.pattern = re.compile(plain)
            except re.error as ex:
                raise ConfigurationError(f"Invalid regex pattern for topic '{plain}': {ex}") from ex
        else:
            self.pattern = None

    @property
    def is_regex(self) -> bool:
        return self.pattern is not None

    def matches(self, topic: str) -> bool:
        if self.pattern is not None:
            return self.pattern.search(topic) is not None
        else:
            return self.plain == topic

    # A literal selector containing glob or regex syntax was probably meant as a pattern
    def looks_like_pattern(self) -> bool:
        return not self.is_regex and any(c in self.plain for c in EXTRACT_CONFIG.REGEX_HINT_CHARACTERS)

    def __repr__(self) -> str:
        return f"TopicSelector(plain={self.plain!r}, regex={self.is_regex})"


class TopicMatcher:
    selectors: List[TopicSelector]
    regex: bool

    def __init__(self, topics: Iterable[str], regex: bool = False):
        self.regex = regex
        self.selectors = [TopicSelector(topic, regex) for topic in topics]

        if not self.selectors:
            raise ConfigurationError("You have not specified any topic to export. Try running `bagimages --help`")

    def matches(self, topic: str) -> bool:
        return any(selector.matches(topic) for selector in self.selectors)

    # With regex selectors there is no way to know how many connections will eventually match
    @property
    def literal_count(self) -> Optional[int]:
        if self.regex:
            return None

        return len(self.selectors)

    def unmatched(self, found_topics: Iterable[str]) -> List[TopicSelector]:
        found_topics = list(found_topics)
        return [selector for selector in self.selectors
                if not any(selector.matches(topic) for topic in found_topics)]
