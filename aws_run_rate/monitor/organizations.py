"""
AWS Organizations account directory.
"""

from typing import Any, Dict
import logging

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import DirectoryError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


def fetch_accounts(org: Any, page_size: int = DEFAULT_PAGE_SIZE) -> Dict[str, str]:
    """Return account id -> account name for every account in the organization.

    `org` is a boto3 `organizations` client (or anything exposing
    `list_accounts`). All pages are read, `page_size` accounts at a time.
    """
    accounts: Dict[str, str] = {}
    token = None
    pages = 0

    while True:
        kwargs: Dict[str, Any] = {"MaxResults": page_size}
        if token:
            kwargs["NextToken"] = token

        try:
            resp = org.list_accounts(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise DirectoryError(f"Failed to list organization accounts: {e}") from e

        pages += 1
        for account in resp.get("Accounts", []):
            account_id = account.get("Id")
            if not account_id:
                raise DirectoryError("ListAccounts returned an account without an Id")
            accounts[account_id] = account.get("Name") or account_id

        token = resp.get("NextToken")
        if not token:
            break

    logger.info(f"Retrieved {len(accounts)} accounts from {pages} page(s)")
    return accounts
