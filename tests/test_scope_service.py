"""Tests for the scope lookup service."""

import re
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from dashboard_api.models.collector import Collector, CollectorItem, CollectorType
from dashboard_api.models.component import Component, ComponentCollectorItem
from dashboard_api.models.scope import Scope
from dashboard_api.services.scope import (
    MAX_PAGE_SIZE,
    AgileCollectorItemNotFoundError,
    ComponentNotFoundError,
    PageRequest,
    ScopeLookupError,
    get_all_scopes,
    get_scope,
    get_scopes_by_collector,
    get_scopes_by_collector_with_filter,
    strip_markup,
)


def _scope(collector_id: uuid.UUID, name: str = "Team A", project_path: str = "/a"):
    return Scope(
        id=uuid.uuid4(),
        scope_id="1001",
        collector_id=collector_id,
        name=name,
        project_path=project_path,
        is_deleted=False,
    )


def _collector(last_executed: datetime | None = None) -> Collector:
    return Collector(
        id=uuid.uuid4(),
        name="Jira",
        collector_type=CollectorType.AGILE_TOOL,
        enabled=True,
        online=True,
        last_executed=last_executed,
    )


def _result(rows: list) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


def _compile_pg(statement):
    """Compile a statement the way the asyncpg-backed engine would."""
    return statement.compile(dialect=postgresql.dialect())


def _component(*links: tuple[CollectorType, CollectorItem, int]) -> Component:
    return Component(
        id=uuid.uuid4(),
        name="Feature widget",
        collector_items=[
            ComponentCollectorItem(
                collector_type=collector_type,
                collector_item=item,
                position=position,
            )
            for collector_type, item, position in links
        ],
    )


class TestStripMarkup:
    """Tests for angle-bracket stripping."""

    def test_removes_angle_brackets(self):
        assert strip_markup("<script>alert(1)</script>") == "scriptalert(1)/script"

    def test_plain_text_unchanged(self):
        assert strip_markup("Team Rocket") == "Team Rocket"

    def test_none_passes_through(self):
        assert strip_markup(None) is None


class TestPageRequest:
    """Tests for page request validation."""

    def test_offset(self):
        assert PageRequest(page=3, size=10).offset == 30

    def test_negative_page(self):
        with pytest.raises(ValueError, match="must not be negative"):
            PageRequest(page=-1)

    @pytest.mark.parametrize("size", [0, MAX_PAGE_SIZE + 1])
    def test_size_out_of_range(self, size):
        with pytest.raises(ValueError, match="Page size"):
            PageRequest(size=size)


class TestGetAllScopes:
    """Tests for get_all_scopes."""

    @pytest.mark.asyncio
    async def test_attaches_collectors(self, mock_db):
        collector = _collector()
        scopes = [_scope(collector.id, project_path="/b"), _scope(collector.id)]
        mock_db.execute.side_effect = [_result(scopes), _result([collector])]

        result = await get_all_scopes(mock_db)

        assert result == scopes
        assert all(scope.collector is collector for scope in result)

    @pytest.mark.asyncio
    async def test_missing_collector_leaves_none(self, mock_db):
        known = _collector()
        scopes = [_scope(known.id), _scope(uuid.uuid4())]
        mock_db.execute.side_effect = [_result(scopes), _result([known])]

        result = await get_all_scopes(mock_db)

        assert result[0].collector is known
        assert result[1].collector is None

    @pytest.mark.asyncio
    async def test_orders_by_code_point_descending_nulls_last(self, mock_db):
        mock_db.execute.side_effect = [_result([])]

        await get_all_scopes(mock_db)

        statement = mock_db.execute.call_args_list[0].args[0]
        sql = str(_compile_pg(statement))
        assert 'ORDER BY scopes.project_path COLLATE "C" DESC NULLS LAST' in sql

    @pytest.mark.asyncio
    async def test_empty_skips_collector_lookup(self, mock_db):
        mock_db.execute.side_effect = [_result([])]

        assert await get_all_scopes(mock_db) == []
        assert mock_db.execute.await_count == 1


class TestGetScope:
    """Tests for get_scope."""

    @pytest.mark.asyncio
    async def test_returns_scopes_with_last_executed(self, mock_db):
        last_run = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
        collector = _collector(last_executed=last_run)
        item = CollectorItem(id=uuid.uuid4(), collector_id=collector.id)
        component = _component((CollectorType.AGILE_TOOL, item, 0))
        scopes = [_scope(collector.id)]

        mock_db.get = AsyncMock(side_effect=[component, collector])
        mock_db.execute.return_value = _result(scopes)

        result = await get_scope(component.id, "1001", mock_db)

        assert result.scopes == scopes
        assert result.last_updated == last_run
        assert mock_db.get.call_args_list[1].args == (Collector, collector.id)
        statement = mock_db.execute.call_args.args[0]
        assert "scopes.scope_id = " in str(statement)

    @pytest.mark.asyncio
    async def test_uses_first_agile_item(self, mock_db):
        first_collector = _collector(datetime(2026, 1, 1, tzinfo=timezone.utc))
        first = CollectorItem(id=uuid.uuid4(), collector_id=first_collector.id)
        second = CollectorItem(id=uuid.uuid4(), collector_id=uuid.uuid4())
        build = CollectorItem(id=uuid.uuid4(), collector_id=uuid.uuid4())
        component = _component(
            (CollectorType.BUILD, build, 0),
            (CollectorType.AGILE_TOOL, second, 1),
            (CollectorType.AGILE_TOOL, first, 0),
        )

        mock_db.get = AsyncMock(side_effect=[component, first_collector])
        mock_db.execute.return_value = _result([])

        result = await get_scope(component.id, "1001", mock_db)

        assert mock_db.get.call_args_list[1].args == (Collector, first_collector.id)
        assert result.last_updated == first_collector.last_executed

    @pytest.mark.asyncio
    async def test_component_not_found(self, mock_db):
        mock_db.get = AsyncMock(return_value=None)

        with pytest.raises(ComponentNotFoundError):
            await get_scope(uuid.uuid4(), "1001", mock_db)

    @pytest.mark.asyncio
    async def test_component_without_agile_item(self, mock_db):
        build = CollectorItem(id=uuid.uuid4(), collector_id=uuid.uuid4())
        component = _component((CollectorType.BUILD, build, 0))
        mock_db.get = AsyncMock(return_value=component)

        with pytest.raises(AgileCollectorItemNotFoundError) as exc_info:
            await get_scope(component.id, "1001", mock_db)
        assert isinstance(exc_info.value, ScopeLookupError)
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_collector_gives_no_timestamp(self, mock_db):
        item = CollectorItem(id=uuid.uuid4(), collector_id=uuid.uuid4())
        component = _component((CollectorType.AGILE_TOOL, item, 0))
        mock_db.get = AsyncMock(side_effect=[component, None])
        mock_db.execute.return_value = _result([])

        result = await get_scope(component.id, "1001", mock_db)

        assert result.scopes == []
        assert result.last_updated is None


class TestGetScopesByCollector:
    """Tests for get_scopes_by_collector."""

    @pytest.mark.asyncio
    async def test_strips_markup(self, mock_db):
        collector_id = uuid.uuid4()
        scopes = [
            _scope(collector_id, name="<b>Team</b>", project_path="<root>/<team>"),
            _scope(collector_id, name="Plain", project_path=None),
        ]
        mock_db.execute.return_value = _result(scopes)

        result = await get_scopes_by_collector(collector_id, mock_db)

        assert [s.name for s in result] == ["bTeam/b", "Plain"]
        assert [s.project_path for s in result] == ["root/team", None]
        for scope in result:
            assert "<" not in scope.name and ">" not in scope.name
            if scope.project_path:
                assert "<" not in scope.project_path and ">" not in scope.project_path

    @pytest.mark.asyncio
    async def test_detaches_before_stripping(self, mock_db):
        collector_id = uuid.uuid4()
        scopes = [_scope(collector_id), _scope(collector_id)]
        mock_db.execute.return_value = _result(scopes)

        await get_scopes_by_collector(collector_id, mock_db)

        assert mock_db.expunge.call_count == 2
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_filters_by_collector(self, mock_db):
        collector_id = uuid.uuid4()
        mock_db.execute.return_value = _result([])

        await get_scopes_by_collector(collector_id, mock_db)

        statement = mock_db.execute.call_args.args[0]
        assert "scopes.collector_id = " in str(statement)
        assert collector_id in statement.compile().params.values()


class TestGetScopesByCollectorWithFilter:
    """Tests for get_scopes_by_collector_with_filter."""

    @pytest.mark.asyncio
    async def test_returns_page(self, mock_db):
        collector_id = uuid.uuid4()
        scopes = [_scope(collector_id, name="ABC team"), _scope(collector_id, name="xabcx")]
        mock_db.scalar.return_value = 12
        mock_db.execute.return_value = _result(scopes)

        page = await get_scopes_by_collector_with_filter(
            collector_id, "abc", PageRequest(page=0, size=10), mock_db
        )

        assert page.items == scopes
        assert page.total == 12
        assert page.page == 0
        assert page.size == 10
        assert page.total_pages == 2

    @pytest.mark.asyncio
    async def test_query_is_case_insensitive_and_paged(self, mock_db):
        collector_id = uuid.uuid4()
        mock_db.scalar.return_value = 0
        mock_db.execute.return_value = _result([])

        await get_scopes_by_collector_with_filter(
            collector_id, "abc", PageRequest(page=2, size=10), mock_db
        )

        compiled = _compile_pg(mock_db.execute.call_args.args[0])
        sql, params = str(compiled), compiled.params

        name_match = re.search(r"scopes\.name ILIKE %\((\w+)\)s ESCAPE ", sql)
        assert name_match is not None
        assert params[name_match.group(1)] == "%abc%"

        collector_match = re.search(r"scopes\.collector_id = %\((\w+)\)s", sql)
        assert collector_match is not None
        assert params[collector_match.group(1)] == collector_id

        paging = re.search(r"LIMIT %\((\w+)\)s OFFSET %\((\w+)\)s", sql)
        assert paging is not None
        assert params[paging.group(1)] == 10
        assert params[paging.group(2)] == 20

    @pytest.mark.asyncio
    async def test_count_uses_same_criteria(self, mock_db):
        collector_id = uuid.uuid4()
        mock_db.scalar.return_value = 0
        mock_db.execute.return_value = _result([])

        await get_scopes_by_collector_with_filter(
            collector_id, "abc", PageRequest(), mock_db
        )

        compiled = _compile_pg(mock_db.scalar.call_args.args[0])
        sql = str(compiled)
        assert sql.startswith("SELECT count(*)")
        assert "scopes.name ILIKE " in sql
        assert "LIMIT" not in sql
        assert "%abc%" in compiled.params.values()
        assert collector_id in compiled.params.values()

    @pytest.mark.asyncio
    async def test_wildcards_match_literally(self, mock_db):
        mock_db.scalar.return_value = 0
        mock_db.execute.return_value = _result([])

        await get_scopes_by_collector_with_filter(
            uuid.uuid4(), "50%_off", PageRequest(), mock_db
        )

        params = mock_db.execute.call_args.args[0].compile().params
        assert "%50\\%\\_off%" in params.values()

    @pytest.mark.asyncio
    async def test_does_not_strip_markup(self, mock_db):
        collector_id = uuid.uuid4()
        scopes = [_scope(collector_id, name="<abc>")]
        mock_db.scalar.return_value = 1
        mock_db.execute.return_value = _result(scopes)

        page = await get_scopes_by_collector_with_filter(
            collector_id, "abc", PageRequest(), mock_db
        )

        assert page.items[0].name == "<abc>"

    @pytest.mark.asyncio
    async def test_no_matches(self, mock_db):
        mock_db.scalar.return_value = None
        mock_db.execute.return_value = _result([])

        page = await get_scopes_by_collector_with_filter(
            uuid.uuid4(), "zzz", PageRequest(), mock_db
        )

        assert page.items == []
        assert page.total == 0
        assert page.total_pages == 0
