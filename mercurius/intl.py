"""
Message catalog for faults and advisories.

The translation engine never composes user-facing text: it selects a key and
hands over parameters. This module turns (key, params) into a string for a
locale.

Lookup order
- __main__.__messages__[locale][key]   (host application overrides)
- MESSAGES[locale][key]
- __main__.__messages__[FALLBACK][key]
- MESSAGES[FALLBACK][key]
- the key itself (so a missing entry is visible instead of silently empty)

Templates use str.format fields ("{option}"); unknown fields are left as-is.
"""
import logging

from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

FALLBACK = "en_US"

MESSAGES = {
    "en_US": {
        "hg-a-option": "The -A option is not needed for this app, just commit away!",
        "hg-error-no-status": "There is no status command for this app, since there is no staging of files. Try hg summary instead",
        "hg-error-log-no-follow": "hg log without -f is currently not supported, use -f",
        "git-error-options": "Those options you specified are incompatible or incorrect",
        "git-error-no-general-args": "That command accepts no general arguments",
        "git-error-args-many": "I expect at most {upper} argument(s) for {what}",
        "git-error-args-few": "I expect at least {lower} argument(s) for {what}",
        "option-incompatible": "{first} is incompatible with {second}",
        "option-required": "the {option} option is required here",
        "error-command-not-found": "The command \"{line}\" isn't supported, sorry!",
        "error-malformed-input": "Couldn't split \"{line}\" into arguments ({reason})",
        "error-canonical-unknown": "{vcs} {name} is not available in this environment",
        "hint-help": "run 'hg help' or check the lesson instructions for supported commands",
        "hint-quotes": "close every quote you open",
        "hint-options": "check which options this command accepts",
    },
    "zh_CN": {
        "hg-a-option": "-A 选项对于本应用来说不是必须的，直接提交就好！",
        "hg-error-no-status": "本应用没有 status 命令，因为没有文件暂存的概念。试试 hg summary 吧",
        "hg-error-log-no-follow": "暂不支持不带 -f 的 hg log 命令，请使用 -f",
        "git-error-options": "你指定的选项不兼容或不正确",
        "git-error-no-general-args": "该命令不接收参数",
        "error-command-not-found": "未找到命令 \"{line}\"，抱歉！",
    },
}


class _Fields(dict):
    # leave unknown fields untouched instead of raising KeyError
    def __missing__(self, key):
        return "{%s}" % key


def templates(locale, /):
    """
    Return the merged template mapping for a locale (host overrides win).
    """
    overrides = getattr(__import__("__main__"), "__messages__", {})
    return MESSAGES.get(FALLBACK, {}) | overrides.get(FALLBACK, {}) | MESSAGES.get(locale, {}) | overrides.get(locale, {})


def getstr(key, /, locale=Unset, **params):
    """
    Render the message registered under `key` for `locale`.

    parameters
    - key: str — catalog key selected by the engine.
    - locale: str | Unset — defaults to FALLBACK.
    - **params — values for the template fields.
    """
    if not isinstance(key, str):
        raise TypeError("getstr() argument must be a string")
    try:
        template = templates(coalesce(locale, FALLBACK))[key]
    except KeyError:
        logger.debug("missing catalog entry %r for locale %r", key, coalesce(locale, FALLBACK))
        return key
    return template.format_map(_Fields(params))


__all__ = (
    "FALLBACK",
    "MESSAGES",
    "templates",
    "getstr",
)
