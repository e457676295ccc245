from textwrap import dedent

import pytest

from cmpgen.codegen import CodeSynthesizer
from cmpgen.spec import CallTarget, UnorderableField
from cmpgen.test_utils import analyze_code

TARGET = CallTarget("cmpgen", "cmp_by_fields", ("cmpgen.runtime",))

PEOPLE = """
from dataclasses import dataclass
from functools import cmp_to_key

from cmpgen import cmp_by_fields


@dataclass
class Person:
    name: str
    age: int


def sort_people(people):
    return sorted(people, key=cmp_to_key(cmp_by_fields[Person]("name", "age")))
"""


@pytest.fixture
def package_dir(tmp_path):
    pkg = tmp_path / "pkg"
    pkg.mkdir()
    (pkg / "__init__.py").write_text("")
    return pkg


def test_renders_companion_for_package_module(package_dir):
    source, calls = analyze_code(package_dir / "people.py", PEOPLE, TARGET)

    generated = CodeSynthesizer(TARGET).synthesize(source, calls)

    assert generated.output_path == package_dir / "people_generated.py"
    assert generated.call_count == 1
    assert generated.content == dedent(
        """\
        # Code generated by cmpgen from people.py. DO NOT EDIT.
        from cmpgen import register

        from .people import Person


        def _init() -> None:
            def compare_0(a: Person, b: Person) -> int:
                return (
                    ((a.name > b.name) - (a.name < b.name))
                    or ((a.age > b.age) - (a.age < b.age))
                )

            register[Person](compare_0, "name", "age")


        _init()
        """
    )


def test_output_is_deterministic(package_dir):
    source, calls = analyze_code(package_dir / "people.py", PEOPLE, TARGET)
    synthesizer = CodeSynthesizer(TARGET)

    first = synthesizer.synthesize(source, calls)
    second = synthesizer.synthesize(source, calls)

    assert first.content == second.content


def test_single_field_and_builtin_type(tmp_path):
    source, calls = analyze_code(
        tmp_path / "numbers.py",
        """
        from cmpgen import cmp_by_fields

        def by_real():
            return cmp_by_fields[complex]("real")
        """,
        TARGET,
    )

    content = CodeSynthesizer(TARGET).synthesize(source, calls).content

    assert "from cmpgen import register\n" in content
    assert "import numbers" not in content
    assert "        return (a.real > b.real) - (a.real < b.real)\n" in content
    assert '    register[complex](compare_0, "real")\n' in content


def test_module_outside_package_imports_by_stem(tmp_path):
    source, calls = analyze_code(tmp_path / "people.py", PEOPLE, TARGET)

    content = CodeSynthesizer(TARGET).synthesize(source, calls).content

    assert "from people import Person\n" in content


def test_imported_types_reuse_the_original_import(package_dir):
    source, calls = analyze_code(
        package_dir / "sorting.py",
        """
        from __future__ import annotations

        import os
        from decimal import Decimal as D
        from .models import Item

        from cmpgen import cmp_by_fields

        def by_price():
            return cmp_by_fields[Item]("price")

        def by_digits():
            return cmp_by_fields[D]("real")
        """,
        TARGET,
    )

    content = CodeSynthesizer(TARGET).synthesize(source, calls).content

    assert "from decimal import Decimal as D\n" in content
    assert "from .models import Item\n" in content
    assert "__future__" not in content
    assert "import os" not in content
    assert '    register[Item](compare_0, "price")\n' in content
    assert '    register[D](compare_1, "real")\n' in content


def test_submodule_imports_of_one_root_are_all_kept(package_dir):
    source, calls = analyze_code(
        package_dir / "nodes.py",
        """
        import xml.dom
        import xml.sax

        from cmpgen import cmp_by_fields

        def by_type():
            return cmp_by_fields[xml.dom.Node]("nodeType")
        """,
        TARGET,
    )

    content = CodeSynthesizer(TARGET).synthesize(source, calls).content

    assert "import xml.dom\nimport xml.sax\n" in content
    assert '    register[xml.dom.Node](compare_0, "nodeType")\n' in content


def test_unpruned_imports_keep_the_original_ones(package_dir):
    source, calls = analyze_code(
        package_dir / "sorting.py",
        """
        import os
        from cmpgen import cmp_by_fields

        def by_real():
            return cmp_by_fields[int]("real")
        """,
        TARGET,
    )

    content = CodeSynthesizer(TARGET, prune_imports=False).synthesize(source, calls).content

    assert "import os\n" in content
    assert "from cmpgen import cmp_by_fields, register\n" in content


def test_generated_names_avoid_collisions(package_dir):
    source, calls = analyze_code(
        package_dir / "clash.py",
        """
        from cmpgen import cmp_by_fields
        from .registry import register as register

        class a:
            value: int

        def by_value():
            return cmp_by_fields[a]("value")
        """,
        TARGET,
    )

    content = CodeSynthesizer(TARGET, prune_imports=False).synthesize(source, calls).content

    assert "from cmpgen import cmp_by_fields, register as register_1\n" in content
    assert "from .registry import register\n" in content
    assert "def compare_0(a_1: a, b: a) -> int:" in content
    assert '    register_1[a](compare_0, "value")\n' in content


def test_forward_reference_is_rendered_verbatim(package_dir):
    source, calls = analyze_code(
        package_dir / "people.py",
        """
        from cmpgen import cmp_by_fields

        def by_name():
            return cmp_by_fields["Person"]("name")

        class Person:
            name: str
        """,
        TARGET,
    )

    content = CodeSynthesizer(TARGET).synthesize(source, calls).content

    assert 'def compare_0(a: "Person", b: "Person") -> int:' in content
    assert '    register["Person"](compare_0, "name")\n' in content


def test_no_calls_yield_nothing(package_dir):
    source, calls = analyze_code(package_dir / "empty.py", "x = 1\n", TARGET)

    assert CodeSynthesizer(TARGET).synthesize(source, calls) is None


def test_custom_suffix(package_dir):
    source, calls = analyze_code(package_dir / "people.py", PEOPLE, TARGET)

    generated = CodeSynthesizer(TARGET, suffix="_cmp").synthesize(source, calls)

    assert generated.output_path.name == "people_cmp.py"


def test_unorderable_field_is_rejected(package_dir):
    source, calls = analyze_code(
        package_dir / "tags.py",
        """
        from typing import Dict
        from cmpgen import cmp_by_fields

        class Tagged:
            name: str
            tags: set[str]
            meta: Dict[str, str]

        def by_tags():
            return cmp_by_fields[Tagged]("name", "tags", "meta")
        """,
        TARGET,
    )
    synthesizer = CodeSynthesizer(TARGET)

    errors = synthesizer.check(source, calls)

    assert [e.category for e in errors] == ["UnorderableField", "UnorderableField"]
    assert "tags" in errors[0].message
    with pytest.raises(UnorderableField):
        synthesizer.synthesize(source, calls)
