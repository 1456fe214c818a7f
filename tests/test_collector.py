"""Tests for collecting marker occurrences into a grouping."""

import pytest

from autoservice.collector import check_implementer, collect
from autoservice.errors import (
    EmptyInterfaceSet,
    MissingArgument,
    NotAnImplementer,
    UnresolvedInterface,
    UnsupportedDeclarationKind,
)
from autoservice.model import DeclarationKind, Grouping, MarkerOccurrence, QualifiedName, SourceUnit


class TestGrouping:
    """Entries land under the interface binary name."""

    def test_single_interface(self, occurrence):
        grouping = collect([occurrence("p:A", "p:I")])
        assert grouping.keys() == ["p.I"]
        assert grouping.entries("p.I") == {("p.A", SourceUnit("p.py", "p"))}

    def test_multiple_interfaces_produce_one_entry_each(self, occurrence):
        grouping = collect([occurrence("p:A", "p:I", "p:J")])
        assert grouping.keys() == ["p.I", "p.J"]
        assert {name for name, _ in grouping.entries("p.J")} == {"p.A"}

    def test_contributions_accumulate_across_units(self, occurrence):
        grouping = collect([
            occurrence("a:A", "api:I", unit="a.py"),
            occurrence("b:B", "api:I", unit="b.py"),
        ])
        assert {unit.path for _, unit in grouping.entries("api.I")} == {"a.py", "b.py"}

    def test_nested_interface_and_implementer_use_binary_names(self, occurrence):
        grouping = collect([occurrence("p:Outer.Impl", "api:Registry.Plugin")])
        assert grouping.keys() == ["api.Registry$Plugin"]
        assert {name for name, _ in grouping.entries("api.Registry$Plugin")} == {"p.Outer$Impl"}

    def test_existing_grouping_is_filled_in_place(self, occurrence):
        grouping = Grouping()
        result = collect([occurrence("p:A", "p:I")], grouping)
        assert result is grouping
        assert "p.I" in grouping

    def test_function_declarations_are_skipped(self, occurrence):
        messages = []
        grouping = collect(
            [occurrence("p:factory", "p:I", kind=DeclarationKind.FUNCTION)],
            log=messages.append,
        )
        assert len(grouping) == 0
        assert any("only classes" in m for m in messages)

    def test_log_reports_each_decision(self, occurrence):
        messages = []
        collect([occurrence("p:A", "p:I")], log=messages.append)
        assert messages == ["p.A provides p.I (p.py)"]


class TestMalformedMarker:
    """Missing and empty interface lists abort the round."""

    def test_no_arguments(self, declaration):
        with pytest.raises(MissingArgument):
            collect([MarkerOccurrence(declaration("p:A"), None)])

    def test_no_value_argument(self, declaration):
        with pytest.raises(MissingArgument):
            collect([MarkerOccurrence(declaration("p:A"), {"other": []})])

    def test_value_is_not_a_type_list(self, declaration, ref):
        with pytest.raises(MissingArgument):
            collect([MarkerOccurrence(declaration("p:A"), {"value": [ref("p:I"), 42]})])

    def test_empty_interface_set(self, declaration):
        with pytest.raises(EmptyInterfaceSet) as exc:
            collect([MarkerOccurrence(declaration("p:A", line=12), {"value": []})])
        assert "p.py:12" in str(exc.value)

    def test_interface_that_is_not_a_class(self, declaration, ref):
        occurrence = MarkerOccurrence(
            declaration("p:A"), {"value": [ref("p:helper", is_class=False)]}
        )
        with pytest.raises(UnresolvedInterface):
            collect([occurrence])

    def test_error_stops_at_first_violation(self, occurrence, declaration):
        grouping = Grouping()
        with pytest.raises(EmptyInterfaceSet):
            collect(
                [occurrence("p:A", "p:I"), MarkerOccurrence(declaration("p:B"), {"value": []})],
                grouping,
            )
        # Collected entries never reach emission: the caller discards the grouping
        assert "p.I" in grouping


class TestVerification:
    """The implements-check only runs with verify=True."""

    def test_unverified_declaration_is_trusted(self, occurrence):
        grouping = collect([occurrence("p:A", "p:I")], verify=False)
        assert grouping.keys() == ["p.I"]

    def test_missing_supertype_fails(self, occurrence):
        with pytest.raises(NotAnImplementer) as exc:
            collect([occurrence("p:A", "p:I")], verify=True)
        assert exc.value.implementer == "p.A"
        assert exc.value.interface == "p.I"
        assert "p.A does not implement p.I" in str(exc.value)

    def test_transitive_supertype_passes(self, occurrence):
        grouping = collect(
            [occurrence("p:A", "api:I", supertypes=("p:Base", "api:I", "builtins:object"))],
            verify=True,
        )
        assert grouping.keys() == ["api.I"]

    def test_each_interface_checked_independently(self, occurrence):
        with pytest.raises(NotAnImplementer) as exc:
            collect([occurrence("p:A", "p:I", "p:J", supertypes=("p:I",))], verify=True)
        assert exc.value.interface == "p.J"

    def test_object_is_always_implemented(self, declaration):
        assert check_implementer(
            declaration("p:A"), QualifiedName("builtins", ("object",)), verify=True
        )


class TestDeclarationKinds:
    def test_local_class_rejected(self, occurrence):
        with pytest.raises(UnsupportedDeclarationKind):
            collect([occurrence("p:f.<locals>.A", "p:I", kind=DeclarationKind.LOCAL_CLASS)])

    def test_anonymous_class_rejected(self, occurrence):
        with pytest.raises(UnsupportedDeclarationKind):
            collect([occurrence("p:A", "p:I", kind=DeclarationKind.ANONYMOUS_CLASS)])
