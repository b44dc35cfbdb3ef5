"""
AST produced by the parser.

The checker never evaluates these nodes.  They exist so that a parse has a
concrete result (statement kind and category for the report), and so that
tests can assert on structure rather than only on "did not raise".
"""

from __future__ import annotations
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, ClassVar


class Category(str, Enum):
    """Statement categories as a SQL tutorial groups them."""
    DDL = "DDL"     # data definition
    DML = "DML"     # data manipulation
    DQL = "DQL"     # data query
    DCL = "DCL"     # data control
    TCL = "TCL"     # transaction control


# ── Expressions ─────────────────────────────────────────────────────────────
@dataclass
class Expr:
    """Base; never instantiated directly."""

@dataclass
class LitInt(Expr):    val: int
@dataclass
class LitFloat(Expr):  val: float
@dataclass
class LitStr(Expr):    val: str
@dataclass
class LitBool(Expr):   val: bool
@dataclass
class LitNull(Expr):   pass
@dataclass
class Param(Expr):     name: str    # ?  :name  @name  $1

@dataclass
class ColRef(Expr):
    table: str | None
    name:  str

@dataclass
class BinOp(Expr):
    op:    str          # '+' '-' '*' '/' '%' '||' '=' '!=' '<' '>' '<=' '>=' 'AND' 'OR'
    left:  Expr
    right: Expr

@dataclass
class UnaryNot(Expr):  expr: Expr
@dataclass
class UnaryMinus(Expr): expr: Expr

@dataclass
class FuncCall(Expr):
    name:     str
    args:     list[Expr]
    distinct: bool
    over:     bool = False   # window call: f(...) OVER (...)

@dataclass
class CaseExpr(Expr):
    operand: Expr | None                  # simple CASE x WHEN …
    whens:   list[tuple[Expr, Expr]]      # (cond, result)
    else_:   Expr | None

@dataclass
class IsNullExpr(Expr):
    expr:    Expr
    negated: bool   # IS NOT NULL

@dataclass
class IsTruthExpr(Expr):
    expr:    Expr
    truth:   str    # TRUE | FALSE | UNKNOWN
    negated: bool

@dataclass
class IsDistinctExpr(Expr):
    left:    Expr
    right:   Expr
    negated: bool   # IS NOT DISTINCT FROM

@dataclass
class LikeExpr(Expr):
    expr:    Expr
    pattern: Expr
    negated: bool
    escape:  Expr | None = None
    ilike:   bool = False

@dataclass
class InExpr(Expr):
    expr:    Expr
    values:  list[Expr] | None    # literal list
    subsel:  Query | None         # or sub-select
    negated: bool

@dataclass
class BetweenExpr(Expr):
    expr:    Expr
    low:     Expr
    high:    Expr
    negated: bool

@dataclass
class ExistsExpr(Expr):
    subsel: Query

@dataclass
class SubSelectExpr(Expr):
    subsel: Query

@dataclass
class QuantifiedCmp(Expr):
    """expr op ANY|ALL|SOME (subquery)"""
    op:         str
    expr:       Expr
    quantifier: str
    subsel:     Query

@dataclass
class CastExpr(Expr):
    expr: Expr
    to:   str

@dataclass
class DefaultExpr(Expr): pass   # DEFAULT inside VALUES (...)

@dataclass
class StarExpr(Expr):
    table: str | None = None    # bare *  or  t.*


# ── Statements ──────────────────────────────────────────────────────────────
@dataclass
class Statement:
    """Base for every top-level statement."""
    KIND:     ClassVar[str] = "?"
    CATEGORY: ClassVar[Category] = Category.DQL

    @property
    def kind(self) -> str:
        return self.KIND

    @property
    def category(self) -> Category:
        return self.CATEGORY


@dataclass
class ColumnDef:
    name:           str
    col_type:       str          # as written, e.g. VARCHAR(255)
    not_null:       bool = False
    unique:         bool = False
    primary_key:    bool = False
    auto_increment: bool = False
    default:        Expr | None = None
    check:          Expr | None = None
    references:     tuple[str, list[str]] | None = None


@dataclass
class TableConstraint:
    kind:      str               # PRIMARY KEY | FOREIGN KEY | UNIQUE | CHECK
    name:      str | None = None
    columns:   list[str] = field(default_factory=list)
    ref_table: str | None = None
    ref_cols:  list[str] = field(default_factory=list)
    check:     Expr | None = None


@dataclass
class CreateTableStmt(Statement):
    KIND = "CREATE TABLE"
    CATEGORY = Category.DDL
    name:           str
    columns:        list[ColumnDef] = field(default_factory=list)
    constraints:    list[TableConstraint] = field(default_factory=list)
    if_not_exists:  bool = False
    as_query:       Query | None = None


@dataclass
class CreateIndexStmt(Statement):
    KIND = "CREATE INDEX"
    CATEGORY = Category.DDL
    name:          str
    table:         str
    columns:       list[str]
    unique:        bool = False
    if_not_exists: bool = False


@dataclass
class CreateViewStmt(Statement):
    KIND = "CREATE VIEW"
    CATEGORY = Category.DDL
    name:       str
    query:      Query
    columns:    list[str] | None = None
    or_replace: bool = False


@dataclass
class CreateDatabaseStmt(Statement):
    CATEGORY = Category.DDL
    name:          str
    object_type:   str = "DATABASE"     # DATABASE | SCHEMA
    if_not_exists: bool = False

    @property
    def kind(self) -> str:
        return f"CREATE {self.object_type}"


@dataclass
class DropStmt(Statement):
    CATEGORY = Category.DDL
    object_type: str                    # TABLE INDEX VIEW DATABASE SCHEMA
    names:       list[str]
    if_exists:   bool = False
    cascade:     bool = False

    @property
    def kind(self) -> str:
        return f"DROP {self.object_type}"


@dataclass
class TruncateStmt(Statement):
    KIND = "TRUNCATE"
    CATEGORY = Category.DDL
    table: str


@dataclass
class AlterAddCol(Statement):
    KIND = "ALTER TABLE"
    CATEGORY = Category.DDL
    table: str
    col:   ColumnDef

@dataclass
class AlterAddConstraint(Statement):
    KIND = "ALTER TABLE"
    CATEGORY = Category.DDL
    table:      str
    constraint: TableConstraint

@dataclass
class AlterDropCol(Statement):
    KIND = "ALTER TABLE"
    CATEGORY = Category.DDL
    table: str
    col:   str

@dataclass
class AlterDropConstraint(Statement):
    KIND = "ALTER TABLE"
    CATEGORY = Category.DDL
    table: str
    name:  str

@dataclass
class AlterModifyCol(Statement):
    KIND = "ALTER TABLE"
    CATEGORY = Category.DDL
    table: str
    col:   ColumnDef

@dataclass
class AlterRenameCol(Statement):
    KIND = "ALTER TABLE"
    CATEGORY = Category.DDL
    table:  str
    old:    str
    new:    str

@dataclass
class AlterRenameTable(Statement):
    KIND = "ALTER TABLE"
    CATEGORY = Category.DDL
    old: str
    new: str


# DML
@dataclass
class InsertStmt(Statement):
    KIND = "INSERT"
    CATEGORY = Category.DML
    table:   str
    columns: list[str] | None = None   # None means all, in order
    rows:    list[list[Expr]] = field(default_factory=list)
    query:   Query | None = None       # INSERT … SELECT

@dataclass
class UpdateStmt(Statement):
    KIND = "UPDATE"
    CATEGORY = Category.DML
    table:  str
    sets:   list[tuple[str, Expr]]
    where_: Expr | None = None
    alias:  str | None = None

@dataclass
class DeleteStmt(Statement):
    KIND = "DELETE"
    CATEGORY = Category.DML
    table:  str
    where_: Expr | None = None


# SELECT pieces
@dataclass
class SelectCol:
    expr:  Expr
    alias: str | None = None

@dataclass
class FromTable:
    name:  str
    alias: str | None = None

@dataclass
class DerivedTable:
    subsel: Query
    alias:  str | None = None

@dataclass
class JoinClause:
    left:      Any   # FromTable | DerivedTable | JoinClause
    join_type: str   # INNER LEFT RIGHT FULL CROSS, optionally NATURAL …
    right:     FromTable | DerivedTable
    on:        Expr | None = None
    using:     list[str] | None = None

@dataclass
class OrderItem:
    expr: Expr
    asc:  bool = True

@dataclass
class SelectStmt(Statement):
    KIND = "SELECT"
    CATEGORY = Category.DQL
    columns:  list[SelectCol | StarExpr]
    from_:    list[Any] = field(default_factory=list)   # comma-separated sources
    where_:   Expr | None = None
    group_by: list[Expr] = field(default_factory=list)
    having:   Expr | None = None
    order_by: list[OrderItem] = field(default_factory=list)
    limit:    Expr | None = None
    offset:   Expr | None = None
    distinct: bool = False
    top:      Expr | None = None

@dataclass
class CompoundSelect(Statement):
    """left UNION|INTERSECT|EXCEPT [ALL] right, with trailing ORDER BY / LIMIT."""
    KIND = "SELECT"
    CATEGORY = Category.DQL
    op:       str
    left:     Query
    right:    Query
    all_:     bool = False
    order_by: list[OrderItem] = field(default_factory=list)
    limit:    Expr | None = None
    offset:   Expr | None = None

@dataclass
class CommonTableExpr:
    name:    str
    query:   Query
    columns: list[str] | None = None

@dataclass
class WithQuery(Statement):
    KIND = "SELECT"
    CATEGORY = Category.DQL
    ctes:      list[CommonTableExpr]
    body:      Statement                # a query, or INSERT/UPDATE/DELETE
    recursive: bool = False

    @property
    def kind(self) -> str:
        return self.body.kind

    @property
    def category(self) -> Category:
        return self.body.category


Query = SelectStmt | CompoundSelect | WithQuery


# DCL
@dataclass
class GrantStmt(Statement):
    KIND = "GRANT"
    CATEGORY = Category.DCL
    privileges:   list[str]
    target:       str | None
    grantees:     list[str]
    grant_option: bool = False

@dataclass
class RevokeStmt(Statement):
    KIND = "REVOKE"
    CATEGORY = Category.DCL
    privileges: list[str]
    target:     str | None
    grantees:   list[str]


# TCL
@dataclass
class BeginStmt(Statement):
    KIND = "BEGIN"
    CATEGORY = Category.TCL

@dataclass
class CommitStmt(Statement):
    KIND = "COMMIT"
    CATEGORY = Category.TCL

@dataclass
class RollbackStmt(Statement):
    KIND = "ROLLBACK"
    CATEGORY = Category.TCL
    savepoint: str | None = None

@dataclass
class SavepointStmt(Statement):
    KIND = "SAVEPOINT"
    CATEGORY = Category.TCL
    name:    str
    release: bool = False

    @property
    def kind(self) -> str:
        return "RELEASE SAVEPOINT" if self.release else "SAVEPOINT"
