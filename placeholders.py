"""Named {placeholder} substitution for endpoint templates."""

import logging
import re

log = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def replace_named_placeholders(template, values):
    """Replace {name} tokens with values[name].

    Unknown names are left as they are, so a half-configured setting
    produces a visibly broken URL rather than a silently wrong one.
    """
    def substitute(match):
        name = match.group(1)
        if name in values and values[name] is not None:
            return str(values[name])
        return match.group(0)

    return _PLACEHOLDER.sub(substitute, template)


def resolve_url(template, setting):
    """Fill an endpoint template from a Setting."""
    url = replace_named_placeholders(template, setting.configuration_values())
    log.debug("url: %s", url)
    return url
