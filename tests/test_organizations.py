import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from aws_run_rate.errors import DirectoryError
from aws_run_rate.monitor.organizations import fetch_accounts


def test_single_page(fake_org) -> None:
    org = fake_org([{"Accounts": [{"Id": "111", "Name": "Alpha"}, {"Id": "222", "Name": "Beta"}]}])

    assert fetch_accounts(org) == {"111": "Alpha", "222": "Beta"}
    assert org.calls == [{"MaxResults": 20}]


def test_follows_next_token(fake_org) -> None:
    org = fake_org(
        [
            {"Accounts": [{"Id": "111", "Name": "Alpha"}], "NextToken": "t1"},
            {"Accounts": [{"Id": "222", "Name": "Beta"}]},
        ]
    )

    accounts = fetch_accounts(org, page_size=1)

    assert accounts == {"111": "Alpha", "222": "Beta"}
    assert org.calls == [{"MaxResults": 1}, {"MaxResults": 1, "NextToken": "t1"}]


def test_preserves_listing_order(fake_org) -> None:
    org = fake_org([{"Accounts": [{"Id": "3", "Name": "C"}, {"Id": "1", "Name": "A"}, {"Id": "2", "Name": "B"}]}])

    assert list(fetch_accounts(org)) == ["3", "1", "2"]


def test_client_error_raises_directory_error(fake_org) -> None:
    err = ClientError({"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "ListAccounts")
    org = fake_org([], error=err)

    with pytest.raises(DirectoryError, match="AccessDeniedException"):
        fetch_accounts(org)


def test_network_error_raises_directory_error(fake_org) -> None:
    org = fake_org([], error=EndpointConnectionError(endpoint_url="https://organizations.us-east-1.amazonaws.com"))

    with pytest.raises(DirectoryError):
        fetch_accounts(org)


def test_account_without_id_is_rejected(fake_org) -> None:
    org = fake_org([{"Accounts": [{"Name": "Orphan"}]}])

    with pytest.raises(DirectoryError):
        fetch_accounts(org)
