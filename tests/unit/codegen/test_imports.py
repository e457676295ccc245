from cmpgen.codegen import ImportSet, NameAllocator
from cmpgen.spec import ImportSpec


def test_import_set_deduplicates_by_bound_name_and_path():
    imports = ImportSet(
        [
            ImportSpec("os"),
            ImportSpec("os.path"),  # also binds "os", but loads os.path
            ImportSpec("dataclasses", name="dataclass"),
            ImportSpec("dataclasses", name="dataclass"),
            ImportSpec("dataclasses", name="field", alias="dc_field"),
        ]
    )

    assert len(imports) == 4
    assert imports.bound_names == {"os", "dataclass", "dc_field"}


def test_future_imports_are_dropped():
    imports = ImportSet([ImportSpec("__future__", name="annotations")])

    assert len(imports) == 0


def test_pruned_keeps_only_used_names():
    imports = ImportSet(
        [
            ImportSpec("os"),
            ImportSpec("typing", name="List"),
            ImportSpec(".models", name="Person"),
        ]
    )

    pruned = imports.pruned({"Person"})

    assert [spec.bound_name for spec in pruned] == ["Person"]


def test_render_groups_and_sorts():
    imports = ImportSet(
        [
            ImportSpec(".people", name="Person"),
            ImportSpec("cmpgen", name="register"),
            ImportSpec("collections", name="OrderedDict"),
            ImportSpec("collections", name="Counter"),
            ImportSpec("numpy", alias="np"),
            ImportSpec("os"),
            ImportSpec(".", name="Shape"),
        ]
    )

    assert imports.render() == [
        "import numpy as np",
        "import os",
        "from cmpgen import register",
        "from collections import Counter, OrderedDict",
        "",
        "from . import Shape",
        "from .people import Person",
    ]


def test_import_spec_paths():
    assert ImportSpec("a.b.c").bound_name == "a"
    assert ImportSpec("a.b.c").resolved_path == "a"
    assert ImportSpec("a.b.c", alias="abc").resolved_path == "a.b.c"
    assert ImportSpec(".", name="x").resolved_path == ".x"
    assert ImportSpec("..models", name="Person").qualified_path("top.sub") == "top.models.Person"
    assert ImportSpec(".models", name="Person").qualified_path("top.sub") == "top.sub.models.Person"
    assert ImportSpec("...", name="x").qualified_path("top") is None
    assert ImportSpec(".models", name="Person").qualified_path(None) is None


def test_name_allocator_avoids_taken_names_and_keywords():
    allocator = NameAllocator({"register", "register_1"})

    assert allocator.allocate("register") == "register_2"
    assert allocator.allocate("register") == "register_3"
    assert allocator.allocate("class") == "class_1"
    assert allocator.allocate("_init") == "_init"


def test_submodule_imports_sharing_a_root_are_distinct():
    imports = ImportSet([ImportSpec("xml.dom"), ImportSpec("xml.sax"), ImportSpec("xml.dom")])

    assert len(imports) == 2
    assert imports.render() == ["import xml.dom", "import xml.sax"]
