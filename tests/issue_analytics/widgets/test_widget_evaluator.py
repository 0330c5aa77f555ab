"""
Tests for reducing widgets to static widgets.
"""

import math

import pytest

from issue_analytics.errors import ErrorKind, ScriptError, WidgetTypeError
from issue_analytics.widgets import (
    EvaluationContext,
    GraphWidget,
    NumberWidget,
    QueryNumberWidget,
    QueryTableField,
    QueryTableWidget,
    ScriptNumberWidget,
    ScriptStringWidget,
    StringWidget,
    TableWidget,
    WidgetEvaluator,
    coerce_script_number,
    coerce_template_number,
)

QUERY = "repo:owner/repo is:open"
QUERY_URL = "https://github.com/owner/repo/issues?q=is%3Aopen"


@pytest.fixture
def widgets() -> WidgetEvaluator:
    return WidgetEvaluator()


@pytest.fixture
def context(search_client, issues) -> EvaluationContext:
    client = search_client({QUERY: issues(7)})
    return EvaluationContext(client=client, userdata={"name": "ada"})


# ============================================================
# Value Widgets
# ============================================================


class TestNumberWidget:
    """Tests for number widgets."""

    async def test_template_value(self, widgets, context):
        widget = NumberWidget(value="{{ 40 + 2 }}", title="answer is {{ value }}")

        result = await widgets.evaluate(widget, context)

        assert result == NumberWidget(value=42, title="answer is 42")

    async def test_numeric_value(self, widgets, context):
        result = await widgets.evaluate(NumberWidget(value=3.5), context)

        assert result.value == 3.5

    async def test_blank_is_zero(self, widgets, context):
        result = await widgets.evaluate(NumberWidget(value="{{ None }}"), context)

        assert result.value == 0

    async def test_non_numeric_is_nan(self, widgets, context):
        result = await widgets.evaluate(NumberWidget(value="many"), context)

        assert math.isnan(result.value)

    async def test_metadata_sees_value(self, widgets, context):
        widget = NumberWidget(
            value="5",
            url="https://example.com/{{ value }}",
            color="{{ 'red' if value > 3 else 'green' }}",
        )

        result = await widgets.evaluate(widget, context)

        assert result.url == "https://example.com/5"
        assert result.color == "red"

    async def test_metadata_cannot_see_query_cache(self, widgets, context):
        widget = NumberWidget(value="1", title="{{ querycache }}")

        with pytest.raises(ScriptError):
            await widgets.evaluate(widget, context)

    async def test_input_is_not_modified(self, widgets, context):
        widget = NumberWidget(value="{{ 1 + 1 }}", title="{{ value }}")

        first = await widgets.evaluate(widget, context)
        second = await widgets.evaluate(widget, context)

        assert widget.value == "{{ 1 + 1 }}"
        assert widget.title == "{{ value }}"
        assert first == second


class TestStringWidget:
    """Tests for string widgets."""

    async def test_template_value(self, widgets, context):
        widget = StringWidget(
            value="hello {{ userdata['name'] }}",
            align="{{ 'right' if value.endswith('ada') else 'left' }}",
            title="{{ value.upper() }}",
        )

        result = await widgets.evaluate(widget, context)

        assert result == StringWidget(value="hello ada", align="right", title="HELLO ADA")

    async def test_unset_metadata_stays_unset(self, widgets, context):
        result = await widgets.evaluate(StringWidget(value="plain"), context)

        assert result.title is None
        assert result.url is None
        assert result.align is None
        assert result.color is None


class TestQueryNumberWidget:
    """Tests for query number widgets."""

    async def test_total_count(self, widgets, context):
        widget = QueryNumberWidget(query=QUERY, title="{{ value }} open")

        result = await widgets.evaluate(widget, context)

        assert result.kind == "number"
        assert result.value == 7
        assert result.title == "7 open"
        assert result.url == QUERY_URL

    async def test_explicit_url(self, widgets, context):
        widget = QueryNumberWidget(query=QUERY, url="https://example.com/{{ value }}")

        result = await widgets.evaluate(widget, context)

        assert result.url == "https://example.com/7"

    async def test_only_counts(self, widgets, context):
        await widgets.evaluate(QueryNumberWidget(query=QUERY), context)

        assert context.client.pages_for(QUERY) == [1]


class TestScriptWidgets:
    """Tests for script number and script string widgets."""

    @pytest.mark.parametrize(
        "script,expected",
        [
            ("return 42", 42),
            ("return 3.5", 3.5),
            ("return '17'", 17),
            ("return userdata['count']", 9),
        ],
    )
    async def test_number_results(self, widgets, context, script, expected):
        context.userdata["count"] = 9

        result = await widgets.evaluate(ScriptNumberWidget(script=script), context)

        assert result == NumberWidget(value=expected)

    @pytest.mark.parametrize("script", ["return 'forty'", "return '1.5'", "return None", "return True"])
    async def test_non_numeric_results_are_nan(self, widgets, context, script):
        result = await widgets.evaluate(ScriptNumberWidget(script=script), context)

        assert math.isnan(result.value)

    async def test_script_failure(self, widgets, context):
        with pytest.raises(ScriptError, match="script failed"):
            await widgets.evaluate(ScriptNumberWidget(script="return undefined_name"), context)

    async def test_script_can_use_client(self, widgets, context):
        script = """
            page = await github.search(None, 'repo:owner/repo is:open', 100, 1)
            return page.total_count
        """

        result = await widgets.evaluate(ScriptNumberWidget(script=script), context)

        assert result.value == 7

    async def test_overrides(self, widgets, context):
        widget = ScriptNumberWidget(
            script="return {'value': 7, 'title': 'from script', 'color': 'red'}",
            title="{{ value }}",
            url="https://example.com/{{ value }}",
        )

        result = await widgets.evaluate(widget, context)

        assert result == NumberWidget(
            value=7,
            title="from script",
            color="red",
            url="https://example.com/7",
        )

    async def test_override_value_is_coerced(self, widgets, context):
        widget = ScriptNumberWidget(script="return {'value': 'none', 'title': 'x'}")

        result = await widgets.evaluate(widget, context)

        assert math.isnan(result.value)
        assert result.title == "x"

    async def test_mapping_without_value_is_not_an_override(self, widgets, context):
        widget = ScriptStringWidget(script="return {'title': 'x'}")

        result = await widgets.evaluate(widget, context)

        assert result.value == "{'title': 'x'}"
        assert result.title is None

    async def test_string_result(self, widgets, context):
        widget = ScriptStringWidget(
            script="return 'hi ' + userdata['name']",
            title="said {{ value }}",
        )

        result = await widgets.evaluate(widget, context)

        assert result == StringWidget(value="hi ada", title="said hi ada")

    async def test_multiline_string_result(self, widgets, context):
        widget = ScriptStringWidget(script='return """first\nsecond"""')

        result = await widgets.evaluate(widget, context)

        assert result.value == "first\nsecond"

    async def test_string_stringifies_non_strings(self, widgets, context):
        result = await widgets.evaluate(ScriptStringWidget(script="return 5"), context)

        assert result.value == "5"

    async def test_string_overrides(self, widgets, context):
        widget = ScriptStringWidget(
            script="return {'value': 'ok', 'align': 'center', 'url': 'https://x'}",
            align="left",
        )

        result = await widgets.evaluate(widget, context)

        assert result == StringWidget(value="ok", align="center", url="https://x")


# ============================================================
# Containers
# ============================================================


class TestGraphWidget:
    """Tests for graph widgets."""

    async def test_elements_become_numbers(self, widgets, context):
        widget = GraphWidget(
            title="{{ userdata['name'] }}",
            elements=(
                NumberWidget(value="1", title="one"),
                QueryNumberWidget(query=QUERY, title="open"),
                ScriptNumberWidget(script="return 3"),
            ),
        )

        result = await widgets.evaluate(widget, context)

        assert result.title == "ada"
        assert [e.value for e in result.elements] == [1, 7, 3]
        assert all(e.kind == "number" for e in result.elements)

    async def test_string_element_is_rejected(self, widgets, context):
        widget = GraphWidget(elements=(NumberWidget(value=1), StringWidget(value="x")))

        with pytest.raises(WidgetTypeError) as info:
            await widgets.evaluate(widget, context)

        assert str(info.value) == "graph widget elements must be number widgets, got string"
        assert info.value.kind is ErrorKind.TYPE_CONSTRAINT

    async def test_title_sees_full_context(self, widgets, context):
        widget = GraphWidget(title="{{ len(querycache) }}")

        result = await widgets.evaluate(widget, context)

        assert result.title == "0"
        assert result.elements == ()


class TestTableWidget:
    """Tests for table widgets."""

    async def test_cells_are_evaluated(self, widgets, context):
        widget = TableWidget(
            title="Table",
            headers=(StringWidget(value="Name"), StringWidget(value="Open")),
            elements=(
                (StringWidget(value="{{ userdata['name'] }}"), QueryNumberWidget(query=QUERY)),
                (ScriptStringWidget(script="return 'bob'"), NumberWidget(value="2")),
            ),
        )

        result = await widgets.evaluate(widget, context)

        assert [h.value for h in result.headers] == ["Name", "Open"]
        assert [[c.value for c in row] for row in result.elements] == [["ada", 7], ["bob", 2]]

    async def test_graph_cell_is_rejected(self, widgets, context):
        widget = TableWidget(elements=((GraphWidget(),),))

        with pytest.raises(WidgetTypeError, match="string or number widgets, got graph"):
            await widgets.evaluate(widget, context)

    async def test_table_header_is_rejected(self, widgets, context):
        widget = TableWidget(headers=(TableWidget(),))

        with pytest.raises(WidgetTypeError, match="got table"):
            await widgets.evaluate(widget, context)


class TestQueryTableWidget:
    """Tests for query table widgets."""

    async def test_default_fields(self, widgets, context):
        widget = QueryTableWidget(query=QUERY, limit=2, title="Open issues")

        result = await widgets.evaluate(widget, context)

        assert result.kind == "table"
        assert result.title == "Open issues"
        assert result.url == QUERY_URL
        assert [h.value for h in result.headers] == ["Issue", "Title"]
        assert result.elements == (
            (
                StringWidget(value="1", url="https://github.com/owner/repo/issues/1"),
                StringWidget(value="issue 1", url="https://github.com/owner/repo/issues/1"),
            ),
            (
                StringWidget(value="2", url="https://github.com/owner/repo/issues/2"),
                StringWidget(value="issue 2", url="https://github.com/owner/repo/issues/2"),
            ),
        )

    async def test_custom_fields(self, widgets, context):
        widget = QueryTableWidget(
            query=QUERY,
            limit=1,
            fields=(
                QueryTableField(title="State", property="state"),
                QueryTableField(value="#{{ item['number'] }}: {{ item['title'] }}"),
                QueryTableField(property="milestone"),
            ),
        )

        result = await widgets.evaluate(widget, context)

        assert [h.value for h in result.headers] == [
            "State",
            "#{{ item['number'] }}: {{ item['title'] }}",
            "milestone",
        ]
        assert [c.value for c in result.elements[0]] == ["open", "#1: issue 1", ""]

    async def test_item_templates_cannot_see_query_cache(self, widgets, context):
        widget = QueryTableWidget(
            query=QUERY,
            limit=1,
            fields=(QueryTableField(value="{{ querycache }}"),),
        )

        with pytest.raises(ScriptError):
            await widgets.evaluate(widget, context)

    async def test_explicit_url(self, widgets, context):
        widget = QueryTableWidget(query=QUERY, url="https://example.com/{{ userdata['name'] }}")

        result = await widgets.evaluate(widget, context)

        assert result.url == "https://example.com/ada"
        assert len(result.elements) == 7

    async def test_shares_cache_with_query_numbers(self, widgets, context):
        await widgets.evaluate(QueryNumberWidget(query=QUERY), context)
        await widgets.evaluate(QueryTableWidget(query=QUERY, limit=5), context)

        assert context.client.pages_for(QUERY) == [1]


def test_coerce_script_number():
    assert coerce_script_number(5) == 5
    assert coerce_script_number("0012") == 12
    assert math.isnan(coerce_script_number("-3"))
    assert math.isnan(coerce_script_number(False))


def test_coerce_template_number():
    assert coerce_template_number("  ") == 0
    assert coerce_template_number("-3") == -3
    assert coerce_template_number("2.50") == 2.5
    assert math.isnan(coerce_template_number("1,000"))
