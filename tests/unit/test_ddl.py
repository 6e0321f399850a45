"""Tests for DDL statement plans."""

from contentstore.models.schema import ColumnDefinition, diff_schema, parse_schema
from contentstore.services.schema import ddl


def col(**kwargs) -> ColumnDefinition:
    return ColumnDefinition(**kwargs)


class TestColumnType:
    def test_ints(self):
        assert ddl.column_type(col(kind="int")) == "INTEGER"
        assert ddl.column_type(col(kind="bigint")) == "BIGINT"
        assert ddl.column_type(col(kind="int", primary=True, auto_increment=True)) == "BIGINT"

    def test_strings(self):
        assert ddl.column_type(col(kind="string", length=200)) == "VARCHAR(200)"
        assert ddl.column_type(col(kind="string")) == "VARCHAR"
        assert ddl.column_type(col(kind="string", length=1000)) == "TEXT"

    def test_json_kinds(self):
        assert ddl.column_type(col(kind="object")) == "TEXT"
        assert ddl.column_type(col(kind="array")) == "TEXT"

    def test_enum(self):
        assert ddl.column_type(col(kind="enum", enum_values=["a", "it's"])) == "ENUM('a', 'it''s')"

    def test_bool_and_timestamp(self):
        assert ddl.column_type(col(kind="bool")) == "SMALLINT"
        assert ddl.column_type(col(kind="timestamp")) == "TIMESTAMP"


class TestColumnClause:
    def test_modifier_order(self):
        clause = ddl.column_clause("t", "email", col(kind="string", length=100, required=True, unique=True, default="x"))
        assert clause == "\"email\" VARCHAR(100) NOT NULL UNIQUE DEFAULT 'x'"

    def test_auto_increment(self):
        clause = ddl.column_clause("t", "ID", col(kind="bigint", primary=True, auto_increment=True))
        assert clause == "\"ID\" BIGINT PRIMARY KEY DEFAULT nextval('t_ID_seq')"

    def test_bool_default(self):
        assert ddl.column_clause("t", "on", col(kind="bool")) == '"on" SMALLINT DEFAULT 0'
        assert ddl.column_clause("t", "on", col(kind="bool", default=True)) == '"on" SMALLINT DEFAULT 1'

    def test_current_timestamp_unquoted(self):
        clause = ddl.column_clause("t", "created", col(kind="timestamp", default="CURRENT_TIMESTAMP"))
        assert clause == '"created" TIMESTAMP DEFAULT CURRENT_TIMESTAMP'


class TestCreate:
    def test_sequence_table_indexes(self):
        schema = parse_schema(
            {
                "ID": {"kind": "bigint", "primary": True, "autoIncrement": True, "index": True},
                "slug": {"kind": "string", "length": 200, "index": True},
                "code": {"kind": "string", "unique": True, "index": True},
            }
        )
        statements = ddl.create_statements("posts", schema)
        assert statements[0] == 'CREATE SEQUENCE IF NOT EXISTS "posts_ID_seq"'
        assert statements[1].startswith('CREATE TABLE IF NOT EXISTS "posts" (')
        assert statements[2:] == ['CREATE INDEX IF NOT EXISTS "idx_posts_slug" ON "posts" ("slug")']

    def test_given_sequence_name(self):
        schema = parse_schema({"ID": {"kind": "bigint", "primary": True, "autoIncrement": True}})
        statements = ddl.create_statements("posts", schema, {"ID": "posts_ID_seq_2"})
        assert statements == [
            'CREATE SEQUENCE IF NOT EXISTS "posts_ID_seq_2"',
            "CREATE TABLE IF NOT EXISTS \"posts\" (\"ID\" BIGINT PRIMARY KEY DEFAULT nextval('posts_ID_seq_2'))",
        ]


class TestAlter:
    def plan(self, stored, desired):
        stored, desired = parse_schema(stored), parse_schema(desired)
        return ddl.alter_statements("t", stored, diff_schema(stored, desired), desired)

    def test_drop_index_before_drop_column(self):
        statements = self.plan(
            {"a": {"kind": "int"}, "b": {"kind": "int", "index": True}},
            {"a": {"kind": "int"}},
        )
        drop_index = statements.index('DROP INDEX IF EXISTS "idx_t_b"')
        drop_column = statements.index('ALTER TABLE "t" DROP COLUMN "b"')
        assert drop_index < drop_column
        assert not any(s.startswith("CREATE INDEX") for s in statements)

    def test_indexes_recreated_last(self):
        statements = self.plan(
            {"a": {"kind": "int", "index": True}},
            {"a": {"kind": "int", "index": True}, "b": {"kind": "string"}},
        )
        assert statements == [
            'DROP INDEX IF EXISTS "idx_t_a"',
            'ALTER TABLE "t" ADD COLUMN "b" VARCHAR',
            'CREATE INDEX IF NOT EXISTS "idx_t_a" ON "t" ("a")',
        ]

    def test_add_required(self):
        statements = self.plan({"a": {"kind": "int"}}, {"a": {"kind": "int"}, "b": {"kind": "int", "required": True, "default": 1}})
        assert statements == [
            "ALTER TABLE \"t\" ADD COLUMN \"b\" INTEGER DEFAULT '1'",
            'ALTER TABLE "t" ALTER COLUMN "b" SET NOT NULL',
        ]

    def test_change(self):
        statements = self.plan(
            {"a": {"kind": "string", "default": "x"}},
            {"a": {"kind": "int", "required": True}},
        )
        assert statements == [
            'ALTER TABLE "t" ALTER COLUMN "a" TYPE INTEGER',
            'ALTER TABLE "t" ALTER COLUMN "a" DROP DEFAULT',
            'ALTER TABLE "t" ALTER COLUMN "a" SET NOT NULL',
        ]

    def test_unchanged_type_not_altered(self):
        statements = self.plan({"a": {"kind": "int"}}, {"a": {"kind": "int", "default": 5}})
        assert statements == ["ALTER TABLE \"t\" ALTER COLUMN \"a\" SET DEFAULT '5'"]


class TestRenameDrop:
    def test_rename_moves_indexes(self):
        schema = parse_schema({"a": {"kind": "int", "index": True}})
        assert ddl.rename_statements("old", "new", schema) == [
            'DROP INDEX IF EXISTS "idx_old_a"',
            'ALTER TABLE "old" RENAME TO "new"',
            'CREATE INDEX IF NOT EXISTS "idx_new_a" ON "new" ("a")',
        ]

    def test_drop_table_if_exists(self):
        assert ddl.drop_table("t") == 'DROP TABLE IF EXISTS "t"'
        assert ddl.drop_sequence("t_ID_seq") == 'DROP SEQUENCE IF EXISTS "t_ID_seq"'


class TestConstrainedChanges:
    def blocked(self, stored, desired):
        stored, desired = parse_schema(stored), parse_schema(desired)
        return ddl.constrained_changes(stored, diff_schema(stored, desired))

    def test_dropping_unique(self):
        assert self.blocked({"a": {"kind": "int"}, "b": {"kind": "int", "unique": True}}, {"a": {"kind": "int"}}) == ["b"]

    def test_retyping_primary(self):
        assert self.blocked({"a": {"kind": "int", "primary": True}}, {"a": {"kind": "string", "primary": True}}) == ["a"]

    def test_default_change_allowed(self):
        assert self.blocked({"a": {"kind": "int", "unique": True}}, {"a": {"kind": "int", "unique": True, "default": 1}}) == []

    def test_plain_columns_allowed(self):
        assert self.blocked({"a": {"kind": "int"}, "b": {"kind": "int"}}, {"a": {"kind": "string"}}) == []
