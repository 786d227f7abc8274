"""Tests for NamespaceResolver subgroup caching."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from config import NamingPolicy
from errors import NamingError
from namespace_resolver import NamespaceCache, NamespaceResolver


def _make_resolver(root=10, preserve_owner=True):
    gitlab_api = MagicMock()
    gitlab_api.find_subgroup.return_value = None
    gitlab_api.create_subgroup.return_value = 77
    policy = NamingPolicy(preserve_source_owner_as_group=preserve_owner)
    return NamespaceResolver(gitlab_api, root, policy), gitlab_api


def test_no_root_namespace_means_personal_namespace() -> None:
    resolver, gitlab_api = _make_resolver(root=None)
    assert resolver.resolve('Acme_Org') is None
    gitlab_api.find_subgroup.assert_not_called()


def test_owner_grouping_disabled_returns_root() -> None:
    resolver, gitlab_api = _make_resolver(preserve_owner=False)
    assert resolver.resolve('Acme_Org') == 10
    gitlab_api.create_subgroup.assert_not_called()


def test_missing_owner_login_returns_root() -> None:
    resolver, gitlab_api = _make_resolver()
    assert resolver.resolve('') == 10
    gitlab_api.find_subgroup.assert_not_called()


def test_subgroup_created_once_per_owner() -> None:
    """Repeated lookups for the same owner must hit the cache."""
    resolver, gitlab_api = _make_resolver()

    assert resolver.resolve('Acme_Org') == 77
    assert resolver.resolve('Acme_Org') == 77
    assert resolver.resolve('Acme_Org') == 77

    gitlab_api.find_subgroup.assert_called_once_with(10, 'acme-org')
    gitlab_api.create_subgroup.assert_called_once_with(10, 'Acme_Org', 'acme-org')
    assert len(resolver.cache) == 1


def test_owner_login_with_symbols_is_sanitized() -> None:
    resolver, gitlab_api = _make_resolver()
    resolver.resolve('Acme Org!')
    gitlab_api.create_subgroup.assert_called_once_with(10, 'Acme Org!', 'acme-org')


def test_existing_subgroup_is_reused() -> None:
    resolver, gitlab_api = _make_resolver()
    gitlab_api.find_subgroup.return_value = 55

    assert resolver.resolve('acme') == 55
    assert resolver.resolve('acme') == 55
    gitlab_api.find_subgroup.assert_called_once()
    gitlab_api.create_subgroup.assert_not_called()


def test_distinct_owners_get_distinct_subgroups() -> None:
    resolver, gitlab_api = _make_resolver()
    gitlab_api.create_subgroup.side_effect = [1, 2]

    assert resolver.resolve('alpha') == 1
    assert resolver.resolve('beta') == 2
    assert resolver.resolve('alpha') == 1
    assert gitlab_api.create_subgroup.call_count == 2


def test_shared_cache_is_honoured() -> None:
    cache = NamespaceCache()
    cache.put(10, 'acme', 99)
    gitlab_api = MagicMock()
    resolver = NamespaceResolver(gitlab_api, 10, NamingPolicy(), cache=cache)

    assert resolver.resolve('ACME') == 99
    gitlab_api.find_subgroup.assert_not_called()


def test_unusable_owner_login_raises() -> None:
    resolver, gitlab_api = _make_resolver()
    with pytest.raises(NamingError):
        resolver.find_or_create_subgroup(10, '!!!')
    gitlab_api.create_subgroup.assert_not_called()
