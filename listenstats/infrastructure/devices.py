# ==============================================================================
# User Agent Classification
# ==============================================================================
"""
DeviceClassifier backed by the ``user-agents`` package (ua-parser rules).
"""

import logging

from user_agents import parse as parse_user_agent

from listenstats.base.enrichment import DeviceClassifier
from listenstats.core.models import DeviceInfo

logger = logging.getLogger(__name__)

# ua-parser's family for anything it does not recognize
UNKNOWN_FAMILY = "Other"


class UserAgentClassifier(DeviceClassifier):
    """Classify listener user agents into a client name and mobile flag."""

    def parse(self, user_agent: str) -> DeviceInfo:
        if not user_agent:
            return DeviceInfo(client=None, is_mobile=False)

        ua = parse_user_agent(user_agent)
        family = ua.browser.family
        if not family or family == UNKNOWN_FAMILY:
            logger.debug("Unrecognized user agent: %s", user_agent)
            return DeviceInfo(client=None, is_mobile=ua.is_mobile)

        version = ua.browser.version_string
        client = f"{family} {version}" if version else family
        return DeviceInfo(client=client, is_mobile=ua.is_mobile)
