"""
Ordering of identity search filters for free-text subjects.
"""
from typing import List

GENERAL = "General"
DIRECTORY_ALIAS = "DirectoryAlias"
MAIL_ADDRESS = "MailAddress"
ACCOUNT_NAME = "AccountName"
LOCAL_GROUP_NAME = "LocalGroupName"


def determine_search_filters(token: str) -> List[str]:
    """
    Return the search filters to try, most likely first.

    Display names and emails hit General before DirectoryAlias; bare words
    are more likely aliases. ``DOMAIN\\user`` adds AccountName. Tokens
    without '@' or '\\' may be a local Azure DevOps group, so LocalGroupName
    goes last.
    """
    token = (token or "").strip()

    if " " in token or "@" in token:
        filters = [GENERAL, DIRECTORY_ALIAS]
    else:
        filters = [DIRECTORY_ALIAS, GENERAL]
    filters.append(MAIL_ADDRESS)
    if "\\" in token:
        filters.append(ACCOUNT_NAME)

    seen = set()
    result = []
    for f in filters:
        key = f.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(f)

    if "@" not in token and "\\" not in token and LOCAL_GROUP_NAME.lower() not in seen:
        result.append(LOCAL_GROUP_NAME)

    return result
