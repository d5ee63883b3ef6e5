import logging
from typing import List

logger = logging.getLogger(__name__)


class URLParser:
    def parse_url_list(self, raw_value: str, name: str) -> List[str]:
        origins = []
        for candidate in raw_value.split(","):
            candidate = candidate.strip().rstrip("/")
            if candidate.startswith(("http://", "https://")):
                origins.append(candidate)
            elif candidate:
                logger.warning("Ignoring %s entry without a scheme: %r", name, candidate)

        if not origins:
            logger.warning("No valid origins configured in %s", name)

        return origins


parser = URLParser()
