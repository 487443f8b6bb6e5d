import sqlite3
from pathlib import Path

import pytest

from core.errors import AlreadyExistsError, DatabaseError, NotFoundError
from storage.container import StorageContainer
from storage.providers.sqlite._db import DEFAULT_CONTENT_FORMATS, ensure_schema, order_clause


@pytest.fixture
def storage(tmp_path: Path) -> StorageContainer:
    return StorageContainer(tmp_path / "keeper.db")


def test_ensure_schema_is_idempotent(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "keeper.db"
    ensure_schema(db_path)
    ensure_schema(db_path)

    with sqlite3.connect(str(db_path)) as conn:
        names = [row[0] for row in conn.execute("SELECT name FROM content_formats ORDER BY name")]
    assert names == sorted(DEFAULT_CONTENT_FORMATS)


def test_order_clause_whitelists_columns() -> None:
    assert order_clause("created_at", "desc") == " ORDER BY created_at DESC"
    assert order_clause("name; DROP TABLE files", "asc") == " ORDER BY name ASC"
    assert order_clause(None, "sideways") == " ORDER BY name ASC"


def test_ping(storage: StorageContainer) -> None:
    assert storage.ping() is True


class TestFolders:
    def test_get_builds_path_from_root(self, storage: StorageContainer) -> None:
        repo = storage.folder_repo()
        top = repo.create("services", None)
        child = repo.create("billing", top.id)

        loaded = repo.get(child.id)

        assert loaded.path == "services/billing"
        assert loaded.parent_id == top.id

    def test_get_missing(self, storage: StorageContainer) -> None:
        with pytest.raises(NotFoundError, match="folder does not exist"):
            storage.folder_repo().get("nope")

    def test_list_and_exists_treat_null_parent_as_top_level(self, storage: StorageContainer) -> None:
        repo = storage.folder_repo()
        top = repo.create("b", None)
        repo.create("a", None)
        repo.create("nested", top.id)

        assert [f.name for f in repo.list(None)] == ["a", "b"]
        assert [f.name for f in repo.list(None, "name", "desc")] == ["b", "a"]
        assert repo.exists("a", None)
        assert not repo.exists("nested", None)
        assert repo.exists("nested", top.id)

    def test_name_taken_by_sibling(self, storage: StorageContainer) -> None:
        repo = storage.folder_repo()
        a = repo.create("a", None)
        repo.create("b", None)

        assert repo.name_taken_by_sibling(a.id, "b")
        assert not repo.name_taken_by_sibling(a.id, "a")
        assert not repo.name_taken_by_sibling(a.id, "c")

    def test_edit_and_delete(self, storage: StorageContainer) -> None:
        repo = storage.folder_repo()
        folder = repo.create("old", None)

        edited = repo.edit(folder.id, "new")

        assert edited.name == "new"
        assert edited.created_at == folder.created_at
        assert repo.delete(folder.id) is True
        assert repo.delete(folder.id) is False
        with pytest.raises(NotFoundError):
            repo.edit(folder.id, "again")

    def test_delete_cascades_to_children_and_files(self, storage: StorageContainer) -> None:
        folders = storage.folder_repo()
        files = storage.file_repo()
        top = folders.create("top", None)
        child = folders.create("child", top.id)
        file = files.create("app.json", child.id)

        folders.delete(top.id)

        with pytest.raises(NotFoundError):
            folders.get(child.id)
        with pytest.raises(NotFoundError):
            files.get(file.id)


class TestFiles:
    def test_crud(self, storage: StorageContainer) -> None:
        repo = storage.file_repo()
        file = repo.create("app.json", None)

        assert repo.get(file.id) == file
        assert repo.exists("app.json", None)
        assert repo.edit(file.id, "app.yaml").name == "app.yaml"
        assert repo.delete(file.id) is True
        with pytest.raises(NotFoundError, match="file does not exist"):
            repo.get(file.id)

    def test_unknown_folder_is_a_database_error(self, storage: StorageContainer) -> None:
        with pytest.raises(DatabaseError):
            storage.file_repo().create("app.json", "missing-folder")


class TestFileContents:
    def test_create_list_and_filter_by_version(self, storage: StorageContainer) -> None:
        file = storage.file_repo().create("app.json", None)
        repo = storage.file_content_repo()
        v1 = repo.create(file.id, "v1", '{"a": 1}', "json")
        v2 = repo.create(file.id, "v2", "a: 1", "yaml")

        assert {c.id for c in repo.list_for_file(file.id)} == {v1.id, v2.id}
        assert repo.list_for_file(file.id, "v2") == [v2]
        assert repo.get(v1.id) == v1

    def test_duplicate_version_rejected(self, storage: StorageContainer) -> None:
        file = storage.file_repo().create("app.json", None)
        repo = storage.file_content_repo()
        repo.create(file.id, "v1", "{}", "json")

        with pytest.raises(AlreadyExistsError, match="file content already exists"):
            repo.create(file.id, "v1", "{}", "json")

    def test_edit_updates_given_fields_only(self, storage: StorageContainer) -> None:
        file = storage.file_repo().create("app.json", None)
        repo = storage.file_content_repo()
        content = repo.create(file.id, "v1", "{}", "json")

        edited = repo.edit(content.id, content='{"b": 2}')

        assert edited.content == '{"b": 2}'
        assert edited.version == "v1"
        assert edited.file_id == file.id

    def test_edit_version_conflict_and_missing(self, storage: StorageContainer) -> None:
        file = storage.file_repo().create("app.json", None)
        repo = storage.file_content_repo()
        repo.create(file.id, "v1", "{}", "json")
        v2 = repo.create(file.id, "v2", "{}", "json")

        with pytest.raises(AlreadyExistsError):
            repo.edit(v2.id, version="v1")
        assert repo.edit(v2.id, version="v2").version == "v2"
        with pytest.raises(NotFoundError, match="file content does not exist"):
            repo.edit("missing", content="x")

    def test_unknown_format_is_a_database_error(self, storage: StorageContainer) -> None:
        file = storage.file_repo().create("app.json", None)
        with pytest.raises(DatabaseError):
            storage.file_content_repo().create(file.id, "v1", "{}", "xml")


class TestListeners:
    def test_list_for_file_ordered_by_name(self, storage: StorageContainer) -> None:
        file = storage.file_repo().create("app.json", None)
        other = storage.file_repo().create("other.json", None)
        repo = storage.listener_repo()
        repo.create(file.id, "zeta", "http://z/hook")
        repo.create(file.id, "alpha", "http://a/hook")
        repo.create(other.id, "beta", "http://b/hook")

        assert [lst.name for lst in repo.list_for_file(file.id)] == ["alpha", "zeta"]

    def test_edit_partial(self, storage: StorageContainer) -> None:
        file = storage.file_repo().create("app.json", None)
        repo = storage.listener_repo()
        listener = repo.create(file.id, "svc", "http://old/hook")

        edited = repo.edit(listener.id, callback_endpoint="http://new/hook")

        assert edited.name == "svc"
        assert edited.callback_endpoint == "http://new/hook"
        with pytest.raises(NotFoundError, match="listener does not exist"):
            repo.edit("missing", name="x")

    def test_deleting_file_removes_listeners(self, storage: StorageContainer) -> None:
        files = storage.file_repo()
        file = files.create("app.json", None)
        repo = storage.listener_repo()
        listener = repo.create(file.id, "svc", "http://svc/hook")

        files.delete(file.id)

        with pytest.raises(NotFoundError):
            repo.get(listener.id)


class TestAliases:
    def test_list_filters_and_paginates(self, storage: StorageContainer) -> None:
        repo = storage.alias_repo()
        repo.create("env", "prod", "red")
        repo.create("env", "dev", "green")
        repo.create("team", "core", "blue")

        assert {a.value for a in repo.list(key="env")} == {"prod", "dev"}
        assert [a.value for a in repo.list(key="env", order_by="value", order_type="asc")] == ["dev", "prod"]
        assert len(repo.list(limit=2)) == 2
        assert [a.value for a in repo.list(order_by="value", limit=1, offset=1)] == ["dev"]

    def test_unique_key_value(self, storage: StorageContainer) -> None:
        repo = storage.alias_repo()
        repo.create("env", "prod", "")

        assert repo.exists("env", "prod")
        with pytest.raises(DatabaseError):
            repo.create("env", "prod", "")

    def test_file_links(self, storage: StorageContainer) -> None:
        files = storage.file_repo()
        f1 = files.create("a.json", None)
        f2 = files.create("b.json", None)
        repo = storage.alias_repo()
        prod = repo.create("env", "prod", "")
        core = repo.create("team", "core", "")

        assert repo.add_to_file(f1.id, [prod.id, core.id]) == 2
        assert repo.add_to_file(f1.id, [prod.id]) == 0
        repo.add_to_file(f2.id, [core.id])

        assert sorted(repo.existing_in_file(f1.id, [prod.id, "other"])) == [prod.id]
        assert [a.id for a in repo.list_for_file(f1.id)] == [prod.id, core.id]

        by_file = repo.list_for_files([f1.id, f2.id, "no-aliases"])
        assert set(by_file) == {f1.id, f2.id}
        assert [a.id for a in by_file[f2.id]] == [core.id]

        assert repo.remove_from_file(f1.id, [prod.id]) == 1
        assert [a.id for a in repo.list_for_file(f1.id)] == [core.id]
        assert repo.list_for_files([]) == {}

    def test_edit_and_delete(self, storage: StorageContainer) -> None:
        repo = storage.alias_repo()
        alias = repo.create("env", "prod", "red")

        assert repo.edit(alias.id, color="blue").color == "blue"
        assert repo.delete(alias.id) is True
        with pytest.raises(NotFoundError, match="alias does not exist"):
            repo.get(alias.id)


def test_content_formats_seeded(storage: StorageContainer) -> None:
    repo = storage.content_format_repo()

    assert [f.name for f in repo.list()] == sorted(DEFAULT_CONTENT_FORMATS)
    assert repo.exists("yaml")
    assert not repo.exists("xml")
