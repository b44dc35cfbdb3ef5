"""
Recursive-descent SQL parser.

The grammar is a reference grammar for tutorial SQL: the common subset of
ANSI, MySQL, PostgreSQL and SQLite that textbooks teach (DDL, DML, DQL,
DCL, TCL).  It recognises statements and builds an AST; it never checks
names against a schema.
"""

from __future__ import annotations

from contextlib import contextmanager

from .errors import ParseError
from .lexer import TT, Token, Lexer
from .nodes import (
    Expr, LitInt, LitFloat, LitStr, LitBool, LitNull, Param, ColRef, BinOp,
    UnaryNot, UnaryMinus, FuncCall, CaseExpr, IsNullExpr, IsTruthExpr,
    IsDistinctExpr, LikeExpr, InExpr,
    BetweenExpr, ExistsExpr, SubSelectExpr, QuantifiedCmp, CastExpr,
    DefaultExpr, StarExpr,
    Statement, ColumnDef, TableConstraint, CreateTableStmt, CreateIndexStmt,
    CreateViewStmt, CreateDatabaseStmt, DropStmt, TruncateStmt,
    AlterAddCol, AlterAddConstraint, AlterDropCol, AlterDropConstraint,
    AlterModifyCol, AlterRenameCol, AlterRenameTable,
    InsertStmt, UpdateStmt, DeleteStmt,
    SelectCol, FromTable, DerivedTable, JoinClause, OrderItem, SelectStmt,
    CompoundSelect, CommonTableExpr, WithQuery, Query,
    GrantStmt, RevokeStmt, BeginStmt, CommitStmt, RollbackStmt, SavepointStmt,
)


# Reserved words that may still name a column or table (`key`, `index`)
KEYWORD_AS_IDENT = {TT.KEY, TT.INDEX}

# Reserved words that double as function names: LEFT(s, 3), IF(c, a, b)
KEYWORD_AS_FUNC = {TT.LEFT, TT.RIGHT, TT.IF}

# Soft keywords that must not be swallowed as an implicit alias
NON_ALIAS_WORDS = {"FETCH", "WINDOW", "RETURNING"}

# Words that extend a type name: DOUBLE PRECISION, INT UNSIGNED, …
TYPE_SUFFIX_WORDS = {"PRECISION", "VARYING", "UNSIGNED", "SIGNED", "ZEROFILL"}

SET_OPS = {TT.UNION: "UNION", TT.INTERSECT: "INTERSECT",
           TT.EXCEPT: "EXCEPT", TT.SETMINUS: "MINUS"}

CMP = {TT.EQ: "=", TT.NEQ: "!=", TT.LT: "<", TT.GT: ">", TT.LTE: "<=", TT.GTE: ">="}

# Privileges are mostly reserved words, so GRANT accepts these token types too
_PRIV_TOKENS = {TT.SELECT, TT.INSERT, TT.UPDATE, TT.DELETE, TT.CREATE,
                TT.DROP, TT.ALTER, TT.INDEX, TT.REFERENCES, TT.ALL, TT.IDENT}

# Nested expressions and subqueries beyond this depth are rejected, well
# before the interpreter's recursion limit
MAX_DEPTH = 50


class Parser:
    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos    = 0
        self.depth  = 0

    # ── helpers ───────────────────────────────────────────────────────
    def _cur(self) -> Token:   return self.tokens[self.pos]
    def _peek(self) -> TT:     return self._cur().type

    def _peek_at(self, offset: int) -> TT:
        p = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[p].type

    def _advance(self) -> Token:
        t = self._cur()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return t

    def _eat(self, tt: TT) -> Token:
        if self._peek() != tt:
            raise ParseError(f"expected {tt.name}", self._cur())
        return self._advance()

    def _eat_if(self, tt: TT) -> bool:
        if self._peek() == tt:
            self._advance(); return True
        return False

    # soft keywords arrive as IDENT tokens
    def _at_word(self, *words: str) -> bool:
        return any(self._cur().is_word(w) for w in words)

    def _eat_word(self, *words: str) -> str:
        if not self._at_word(*words):
            raise ParseError(f"expected {' or '.join(words)}", self._cur())
        return self._advance().value.upper()

    def _eat_word_if(self, *words: str) -> bool:
        if self._at_word(*words):
            self._advance(); return True
        return False

    @contextmanager
    def _nested(self):
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise ParseError("expression nested too deeply", self._cur())
        yield
        self.depth -= 1

    def _eat_ident(self) -> str:
        t = self._cur()
        if t.type == TT.IDENT or t.type in KEYWORD_AS_IDENT:
            self._advance()
            return t.value
        raise ParseError("expected identifier", t)

    def _ident_list(self) -> list[str]:
        out = [self._eat_ident()]
        while self._eat_if(TT.COMMA):
            out.append(self._eat_ident())
        return out

    def _paren_idents(self) -> list[str]:
        self._eat(TT.LPAREN)
        cols = self._ident_list()
        self._eat(TT.RPAREN)
        return cols

    def _qualified_name(self) -> str:
        """schema.table or db.schema.table, returned dotted."""
        parts = [self._eat_ident()]
        while self._eat_if(TT.DOT):
            parts.append(self._eat_ident())
        return ".".join(parts)

    def _if_not_exists(self) -> bool:
        if self._peek() == TT.IF:
            self._eat(TT.IF); self._eat(TT.NOT); self._eat(TT.EXISTS)
            return True
        return False

    def _if_exists(self) -> bool:
        if self._peek() == TT.IF:
            self._eat(TT.IF); self._eat(TT.EXISTS)
            return True
        return False

    def _alias(self) -> str | None:
        if self._eat_if(TT.AS):
            if self._peek() == TT.STR:
                return self._advance().value
            return self._eat_ident()
        if self._peek() == TT.IDENT and not self._at_word(*NON_ALIAS_WORDS):
            return self._eat_ident()
        return None

    # ─── top ──────────────────────────────────────────────────────────
    def parse(self) -> Statement:
        """Exactly one statement, optional trailing semicolon."""
        stmt = self._statement()
        self._eat_if(TT.SEMI)
        if self._peek() != TT.EOF:
            raise ParseError("expected end of input", self._cur())
        return stmt

    def parse_script(self, require_semicolon: bool = False) -> list[Statement]:
        """Semicolon-separated statements.  Empty statements are ignored."""
        stmts: list[Statement] = []
        while True:
            while self._eat_if(TT.SEMI):
                pass
            if self._peek() == TT.EOF:
                break
            stmts.append(self._statement())
            if self._eat_if(TT.SEMI):
                continue
            if self._peek() != TT.EOF:
                raise ParseError("expected ';' or end of input", self._cur())
            if require_semicolon:
                raise ParseError("statement must end with ';'", self._cur())
            break
        return stmts

    def _statement(self) -> Statement:
        match self._peek():
            case TT.SELECT | TT.WITH | TT.LPAREN:
                return self._query()
            case TT.CREATE:   return self._create()
            case TT.DROP:     return self._drop()
            case TT.INSERT:   return self._insert()
            case TT.UPDATE:   return self._update()
            case TT.DELETE:   return self._delete()
            case TT.ALTER:    return self._alter()
            case TT.BEGIN:
                self._advance()
                self._eat_word_if("TRANSACTION", "WORK")
                return BeginStmt()
            case TT.COMMIT:
                self._advance()
                self._eat_word_if("TRANSACTION", "WORK")
                return CommitStmt()
            case TT.ROLLBACK: return self._rollback()
            case TT.IDENT:
                if self._at_word("TRUNCATE"):  return self._truncate()
                if self._at_word("GRANT"):     return self._grant()
                if self._at_word("REVOKE"):    return self._revoke()
                if self._at_word("START"):
                    self._advance(); self._eat_word("TRANSACTION")
                    return BeginStmt()
                if self._at_word("SAVEPOINT"):
                    self._advance()
                    return SavepointStmt(name=self._eat_ident())
                if self._at_word("RELEASE"):
                    self._advance(); self._eat_word_if("SAVEPOINT")
                    return SavepointStmt(name=self._eat_ident(), release=True)
        raise ParseError("expected statement", self._cur())

    # ─── CREATE ───────────────────────────────────────────────────────
    def _create(self) -> Statement:
        self._eat(TT.CREATE)
        or_replace = False
        if self._eat_if(TT.OR):
            self._eat_word("REPLACE")
            or_replace = True
        if self._at_word("VIEW"):
            return self._create_view(or_replace)
        if or_replace:
            raise ParseError("expected VIEW after CREATE OR REPLACE", self._cur())
        self._eat_word_if("TEMPORARY", "TEMP")
        if self._peek() == TT.TABLE:
            return self._create_table()
        if self._peek() in (TT.INDEX, TT.UNIQUE):
            return self._create_index()
        if self._at_word("DATABASE", "SCHEMA"):
            kind = self._advance().value.upper()
            ine = self._if_not_exists()
            return CreateDatabaseStmt(name=self._eat_ident(), object_type=kind, if_not_exists=ine)
        raise ParseError("expected TABLE, INDEX, VIEW or DATABASE", self._cur())

    def _create_table(self) -> CreateTableStmt:
        self._eat(TT.TABLE)
        ine = self._if_not_exists()
        name = self._qualified_name()
        if self._eat_if(TT.AS):
            return CreateTableStmt(name=name, if_not_exists=ine, as_query=self._query())
        self._eat(TT.LPAREN)

        cols, constraints = [], []
        while True:
            if self._peek() in (TT.PRIMARY, TT.FOREIGN, TT.UNIQUE, TT.CHECK, TT.CONSTRAINT):
                constraints.append(self._table_constraint())
            else:
                cols.append(self._column_def())
            if not self._eat_if(TT.COMMA):
                break
        self._eat(TT.RPAREN)
        self._table_options()
        return CreateTableStmt(name=name, columns=cols, constraints=constraints,
                               if_not_exists=ine)

    def _table_options(self):
        """MySQL trailer: ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 …"""
        while self._peek() in (TT.IDENT, TT.DEFAULT):
            self._advance()
            if self._eat_if(TT.EQ):
                if self._peek() not in (TT.IDENT, TT.INT, TT.STR, TT.DEFAULT):
                    raise ParseError("expected table option value", self._cur())
                self._advance()

    def _type_name(self) -> str:
        t = self._cur()
        if t.type != TT.IDENT:
            raise ParseError("expected column type", t)
        words = [self._advance().value.upper()]
        while self._peek() == TT.IDENT and self._cur().value.upper() in TYPE_SUFFIX_WORDS:
            words.append(self._advance().value.upper())
        name = " ".join(words)
        if self._eat_if(TT.LPAREN):
            params = []
            while True:
                p = self._cur()
                if p.type not in (TT.INT, TT.IDENT, TT.STR):
                    raise ParseError("expected type parameter", p)
                self._advance()
                params.append(f"'{p.value}'" if p.type == TT.STR else str(p.value))
                if not self._eat_if(TT.COMMA):
                    break
            self._eat(TT.RPAREN)
            name += "(" + ",".join(params) + ")"
        while self._peek() == TT.IDENT and self._cur().value.upper() in TYPE_SUFFIX_WORDS:
            name += " " + self._advance().value.upper()
        return name

    def _column_def(self, type_keyword: bool = False) -> ColumnDef:
        name = self._eat_ident()
        if type_keyword:
            self._eat_word_if("TYPE")
        col = ColumnDef(name=name, col_type=self._type_name())
        # constraint flags (any order)
        while True:
            if self._eat_if(TT.CONSTRAINT):
                self._eat_ident()
            elif self._eat_if(TT.PRIMARY):
                self._eat(TT.KEY); col.primary_key = True
                if not self._eat_if(TT.ASC):
                    self._eat_if(TT.DESC)
            elif self._eat_if(TT.NOT):
                self._eat(TT.NULL); col.not_null = True
            elif self._eat_if(TT.NULL):
                col.not_null = False
            elif self._eat_if(TT.UNIQUE):
                self._eat_if(TT.KEY); col.unique = True
            elif self._eat_if(TT.DEFAULT):
                col.default = self._unary()
            elif self._eat_if(TT.CHECK):
                self._eat(TT.LPAREN)
                col.check = self._expr()
                self._eat(TT.RPAREN)
            elif self._peek() == TT.REFERENCES:
                col.references = self._references()
            elif self._peek() == TT.ON and self._peek_at(1) == TT.UPDATE:
                # MySQL: … DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP
                self._advance(); self._advance()
                self._unary()
            elif self._eat_word_if("AUTO_INCREMENT", "AUTOINCREMENT", "IDENTITY"):
                col.auto_increment = True
                if self._eat_if(TT.LPAREN):
                    self._eat(TT.INT); self._eat(TT.COMMA); self._eat(TT.INT)
                    self._eat(TT.RPAREN)
            elif self._eat_word_if("COLLATE"):
                self._eat_ident()
            elif self._eat_word_if("COMMENT"):
                self._eat(TT.STR)
            else:
                break
        return col

    def _references(self) -> tuple[str, list[str]]:
        self._eat(TT.REFERENCES)
        tbl = self._qualified_name()
        cols = self._paren_idents() if self._peek() == TT.LPAREN else []
        # ON DELETE / ON UPDATE referential actions
        while self._eat_if(TT.ON):
            if not self._eat_if(TT.DELETE):
                self._eat(TT.UPDATE)
            if self._eat_if(TT.SET):
                if not self._eat_if(TT.NULL):
                    self._eat(TT.DEFAULT)
            elif self._eat_word_if("NO"):
                self._eat_word("ACTION")
            else:
                self._eat_word("CASCADE", "RESTRICT")
        return tbl, cols

    def _table_constraint(self) -> TableConstraint:
        name = self._eat_ident() if self._eat_if(TT.CONSTRAINT) else None
        if self._eat_if(TT.PRIMARY):
            self._eat(TT.KEY)
            return TableConstraint("PRIMARY KEY", name, self._paren_idents())
        if self._eat_if(TT.FOREIGN):
            self._eat(TT.KEY)
            cols = self._paren_idents()
            ref_table, ref_cols = self._references()
            return TableConstraint("FOREIGN KEY", name, cols, ref_table, ref_cols)
        if self._eat_if(TT.UNIQUE):
            if self._eat_if(TT.KEY) or self._eat_if(TT.INDEX):
                if self._peek() == TT.IDENT:
                    self._eat_ident()       # MySQL index name
            return TableConstraint("UNIQUE", name, self._paren_idents())
        if self._eat_if(TT.CHECK):
            self._eat(TT.LPAREN)
            cond = self._expr()
            self._eat(TT.RPAREN)
            return TableConstraint("CHECK", name, check=cond)
        raise ParseError("expected PRIMARY KEY, FOREIGN KEY, UNIQUE or CHECK", self._cur())

    def _create_index(self) -> CreateIndexStmt:
        uniq = self._eat_if(TT.UNIQUE)
        self._eat(TT.INDEX)
        ine = self._if_not_exists()
        idx_name = self._eat_ident()
        self._eat(TT.ON)
        tbl = self._qualified_name()
        self._eat(TT.LPAREN)
        cols = []
        while True:
            cols.append(self._eat_ident())
            if not self._eat_if(TT.ASC):
                self._eat_if(TT.DESC)
            if not self._eat_if(TT.COMMA):
                break
        self._eat(TT.RPAREN)
        return CreateIndexStmt(name=idx_name, table=tbl, columns=cols,
                               unique=uniq, if_not_exists=ine)

    def _create_view(self, or_replace: bool) -> CreateViewStmt:
        self._eat_word("VIEW")
        self._if_not_exists()
        name = self._qualified_name()
        cols = self._paren_idents() if self._peek() == TT.LPAREN else None
        self._eat(TT.AS)
        query = self._query()
        if self._eat_if(TT.WITH):
            self._eat_word_if("CASCADED", "LOCAL")
            self._eat(TT.CHECK); self._eat_word("OPTION")
        return CreateViewStmt(name=name, query=query, columns=cols, or_replace=or_replace)

    # ─── DROP / TRUNCATE ──────────────────────────────────────────────
    def _drop(self) -> DropStmt:
        self._eat(TT.DROP)
        if self._peek() in (TT.TABLE, TT.INDEX):
            obj = self._advance().type.name
        elif self._at_word("VIEW", "DATABASE", "SCHEMA"):
            obj = self._advance().value.upper()
        else:
            raise ParseError("expected TABLE, INDEX, VIEW or DATABASE after DROP", self._cur())
        ie = self._if_exists()
        names = [self._qualified_name()]
        while self._eat_if(TT.COMMA):
            names.append(self._qualified_name())
        if obj == "INDEX" and self._eat_if(TT.ON):
            self._qualified_name()          # MySQL: DROP INDEX idx ON tbl
        cascade = self._at_word("CASCADE")
        self._eat_word_if("CASCADE", "RESTRICT")
        return DropStmt(object_type=obj, names=names, if_exists=ie, cascade=cascade)

    def _truncate(self) -> TruncateStmt:
        self._eat_word("TRUNCATE")
        self._eat_if(TT.TABLE)
        return TruncateStmt(table=self._qualified_name())

    # ─── INSERT ───────────────────────────────────────────────────────
    def _insert(self) -> InsertStmt:
        self._eat(TT.INSERT); self._eat(TT.INTO)
        table = self._qualified_name()
        cols = None
        if self._peek() == TT.LPAREN and self._peek_at(1) not in (TT.SELECT, TT.WITH):
            cols = self._paren_idents()
        if self._eat_if(TT.DEFAULT):
            self._eat(TT.VALUES)
            return InsertStmt(table=table, columns=cols)
        if self._peek() in (TT.SELECT, TT.WITH, TT.LPAREN):
            return InsertStmt(table=table, columns=cols, query=self._query())
        self._eat(TT.VALUES)
        rows = []
        while True:
            self._eat(TT.LPAREN)
            row = [self._expr()]
            while self._eat_if(TT.COMMA):
                row.append(self._expr())
            self._eat(TT.RPAREN)
            rows.append(row)
            if not self._eat_if(TT.COMMA):
                break
        return InsertStmt(table=table, columns=cols, rows=rows)

    # ─── ALTER TABLE ──────────────────────────────────────────────────
    def _alter(self) -> Statement:
        self._eat(TT.ALTER); self._eat(TT.TABLE)
        tbl = self._qualified_name()
        if self._eat_word_if("ADD"):
            if self._peek() in (TT.PRIMARY, TT.FOREIGN, TT.UNIQUE, TT.CHECK, TT.CONSTRAINT):
                return AlterAddConstraint(table=tbl, constraint=self._table_constraint())
            self._eat_word_if("COLUMN")   # COLUMN keyword is optional
            return AlterAddCol(table=tbl, col=self._column_def())
        if self._eat_if(TT.DROP):
            if self._eat_if(TT.CONSTRAINT):
                return AlterDropConstraint(table=tbl, name=self._eat_ident())
            self._eat_word_if("COLUMN")
            return AlterDropCol(table=tbl, col=self._eat_ident())
        if self._eat_word_if("RENAME"):
            if self._eat_if(TT.TO):
                return AlterRenameTable(old=tbl, new=self._qualified_name())
            self._eat_word_if("COLUMN")
            old = self._eat_ident()
            self._eat(TT.TO)
            return AlterRenameCol(table=tbl, old=old, new=self._eat_ident())
        if self._eat_word_if("MODIFY"):
            self._eat_word_if("COLUMN")
            return AlterModifyCol(table=tbl, col=self._column_def())
        if self._eat_if(TT.ALTER):
            self._eat_word_if("COLUMN")
            return AlterModifyCol(table=tbl, col=self._column_def(type_keyword=True))
        raise ParseError("expected ADD, DROP, RENAME, MODIFY or ALTER", self._cur())

    # ─── UPDATE / DELETE ──────────────────────────────────────────────
    def _update(self) -> UpdateStmt:
        self._eat(TT.UPDATE)
        tbl = self._qualified_name()
        alias = self._alias()
        self._eat(TT.SET)
        sets = []
        while True:
            col = self._qualified_name()
            self._eat(TT.EQ)
            sets.append((col, self._expr()))
            if not self._eat_if(TT.COMMA):
                break
        w = self._where() if self._peek() == TT.WHERE else None
        return UpdateStmt(table=tbl, sets=sets, where_=w, alias=alias)

    def _delete(self) -> DeleteStmt:
        self._eat(TT.DELETE); self._eat(TT.FROM)
        tbl = self._qualified_name()
        self._alias()
        w = self._where() if self._peek() == TT.WHERE else None
        return DeleteStmt(table=tbl, where_=w)

    # ─── DCL ──────────────────────────────────────────────────────────
    def _privileges(self) -> list[str]:
        privs = []
        while True:
            t = self._cur()
            if t.type not in _PRIV_TOKENS:
                raise ParseError("expected privilege", t)
            self._advance()
            priv = t.value.upper()
            if t.type == TT.ALL:
                self._eat_word_if("PRIVILEGES")
            if self._peek() == TT.LPAREN:
                priv += "(" + ",".join(self._paren_idents()) + ")"
            privs.append(priv)
            if not self._eat_if(TT.COMMA):
                return privs

    def _grant_target(self) -> str:
        """tbl | schema.tbl | db.* | *.*"""
        self._eat_if(TT.TABLE)
        parts = []
        while True:
            if self._eat_if(TT.STAR):
                parts.append("*")
            else:
                parts.append(self._eat_ident())
            if not self._eat_if(TT.DOT):
                return ".".join(parts)

    def _account_part(self) -> str:
        if self._peek() == TT.STR:
            return self._advance().value
        return self._eat_ident()

    def _account(self) -> str:
        """role | user | 'user'@'host' | user@host"""
        name = self._account_part()
        if self._eat_if(TT.AT):
            return f"{name}@{self._account_part()}"
        # an unquoted host arrives as an @name parameter
        if self._peek() == TT.PARAM and self._cur().value.startswith("@"):
            return name + self._advance().value
        return name

    def _grantees(self) -> list[str]:
        out = [self._account()]
        while self._eat_if(TT.COMMA):
            out.append(self._account())
        return out

    def _grant(self) -> GrantStmt:
        self._eat_word("GRANT")
        privs = self._privileges()
        target = self._grant_target() if self._eat_if(TT.ON) else None
        self._eat(TT.TO)
        grantees = self._grantees()
        opt = False
        if self._eat_if(TT.WITH):
            self._eat_word("GRANT"); self._eat_word("OPTION")
            opt = True
        return GrantStmt(privileges=privs, target=target, grantees=grantees, grant_option=opt)

    def _revoke(self) -> RevokeStmt:
        self._eat_word("REVOKE")
        privs = self._privileges()
        target = self._grant_target() if self._eat_if(TT.ON) else None
        self._eat(TT.FROM)
        grantees = self._grantees()
        self._eat_word_if("CASCADE", "RESTRICT")
        return RevokeStmt(privileges=privs, target=target, grantees=grantees)

    # ─── TCL ──────────────────────────────────────────────────────────
    def _rollback(self) -> RollbackStmt:
        self._eat(TT.ROLLBACK)
        self._eat_word_if("TRANSACTION", "WORK")
        if self._eat_if(TT.TO):
            self._eat_word_if("SAVEPOINT")
            return RollbackStmt(savepoint=self._eat_ident())
        return RollbackStmt()

    # ─── SELECT ───────────────────────────────────────────────────────
    def _query(self) -> Query:
        with self._nested():
            if self._peek() == TT.WITH:
                return self._with_query()
            q = self._query_term()
            while self._peek() in SET_OPS:
                op = SET_OPS[self._advance().type]
                all_ = self._eat_if(TT.ALL)
                if not all_:
                    self._eat_if(TT.DISTINCT)
                q = CompoundSelect(op=op, left=q, right=self._query_term(), all_=all_)
            self._query_tail(q)
            return q

    def _query_term(self) -> Query:
        if self._eat_if(TT.LPAREN):
            q = self._query()
            self._eat(TT.RPAREN)
            return q
        return self._select()

    def _with_query(self) -> WithQuery:
        self._eat(TT.WITH)
        recursive = self._eat_word_if("RECURSIVE")
        ctes = []
        while True:
            name = self._eat_ident()
            cols = self._paren_idents() if self._peek() == TT.LPAREN else None
            self._eat(TT.AS)
            self._eat(TT.LPAREN)
            ctes.append(CommonTableExpr(name=name, query=self._query(), columns=cols))
            self._eat(TT.RPAREN)
            if not self._eat_if(TT.COMMA):
                break
        match self._peek():
            case TT.INSERT: body = self._insert()
            case TT.UPDATE: body = self._update()
            case TT.DELETE: body = self._delete()
            case _:         body = self._query()
        return WithQuery(ctes=ctes, body=body, recursive=recursive)

    def _select(self) -> SelectStmt:
        self._eat(TT.SELECT)
        distinct = self._eat_if(TT.DISTINCT)
        if not distinct:
            self._eat_if(TT.ALL)

        top = None
        if self._eat_if(TT.TOP):
            top = self._atom()
            self._eat_word_if("PERCENT")

        # column list
        cols: list[SelectCol | StarExpr] = []
        while True:
            if self._peek() == TT.STAR:
                self._advance()
                cols.append(StarExpr())
            else:
                e = self._expr()
                if isinstance(e, StarExpr):
                    cols.append(e)
                else:
                    cols.append(SelectCol(expr=e, alias=self._alias()))
            if not self._eat_if(TT.COMMA):
                break

        # FROM
        from_ = []
        if self._eat_if(TT.FROM):
            from_.append(self._from_clause())
            while self._eat_if(TT.COMMA):
                from_.append(self._from_clause())

        # WHERE
        where_ = self._where() if self._peek() == TT.WHERE else None

        # GROUP BY
        group_by = []
        if self._peek() == TT.GROUP:
            self._eat(TT.GROUP); self._eat(TT.BY)
            group_by.append(self._expr())
            while self._eat_if(TT.COMMA):
                group_by.append(self._expr())

        # HAVING
        having = None
        if self._eat_if(TT.HAVING):
            having = self._expr()

        return SelectStmt(columns=cols, from_=from_, where_=where_,
                          group_by=group_by, having=having,
                          distinct=distinct, top=top)

    def _query_tail(self, q: Query):
        """ORDER BY / LIMIT / OFFSET / FETCH, attached to the outermost query."""
        order_by = []
        if self._peek() == TT.ORDER:
            self._eat(TT.ORDER); self._eat(TT.BY)
            order_by.append(self._order_item())
            while self._eat_if(TT.COMMA):
                order_by.append(self._order_item())

        limit = offset = None
        if self._eat_if(TT.LIMIT):
            limit = self._expr()
            if self._eat_if(TT.COMMA):          # MySQL: LIMIT offset, count
                offset, limit = limit, self._expr()
        if self._eat_if(TT.OFFSET):
            offset = self._expr()
            self._eat_word_if("ROWS", "ROW")
        if self._eat_word_if("FETCH"):
            self._eat_word("FIRST", "NEXT")
            limit = LitInt(1) if self._at_word("ROWS", "ROW") else self._expr()
            self._eat_word("ROWS", "ROW")
            self._eat_word("ONLY")

        # (WITH … SELECT …) ORDER BY …: the tail belongs to the body
        if isinstance(q, WithQuery):
            q = q.body
        if order_by:
            q.order_by = order_by
        if limit is not None:
            q.limit = limit
        if offset is not None:
            q.offset = offset

    def _from_clause(self):
        tbl = self._table_ref()
        # chained JOINs
        while True:
            if self._eat_if(TT.CROSS):
                self._eat(TT.JOIN)
                tbl = JoinClause(left=tbl, join_type="CROSS", right=self._table_ref())
                continue
            natural = self._eat_if(TT.NATURAL)
            if self._peek() == TT.JOIN:
                jt = "INNER"
            elif self._eat_if(TT.INNER):
                jt = "INNER"
            elif self._peek() in (TT.LEFT, TT.RIGHT, TT.FULL):
                jt = self._advance().type.name
                self._eat_if(TT.OUTER)
            elif natural:
                raise ParseError("expected JOIN after NATURAL", self._cur())
            else:
                return tbl
            self._eat(TT.JOIN)
            right = self._table_ref()
            if natural:
                tbl = JoinClause(left=tbl, join_type="NATURAL " + jt, right=right)
            elif self._eat_if(TT.ON):
                tbl = JoinClause(left=tbl, join_type=jt, right=right, on=self._expr())
            elif self._eat_if(TT.USING):
                tbl = JoinClause(left=tbl, join_type=jt, right=right, using=self._paren_idents())
            else:
                raise ParseError("expected ON or USING", self._cur())

    def _table_ref(self):
        with self._nested():
            return self._table_primary()

    def _table_primary(self):
        if self._eat_if(TT.LPAREN):
            if self._peek() in (TT.SELECT, TT.WITH, TT.LPAREN):
                sub = self._query()
                self._eat(TT.RPAREN)
                return DerivedTable(subsel=sub, alias=self._alias())
            # parenthesised join
            inner = self._from_clause()
            self._eat(TT.RPAREN)
            return inner
        name = self._qualified_name()
        return FromTable(name=name, alias=self._alias())

    def _where(self) -> Expr:
        self._eat(TT.WHERE)
        return self._expr()

    def _order_item(self) -> OrderItem:
        e = self._expr()
        asc = True
        if self._eat_if(TT.ASC):   asc = True
        elif self._eat_if(TT.DESC): asc = False
        if self._eat_word_if("NULLS"):
            self._eat_word("FIRST", "LAST")
        return OrderItem(expr=e, asc=asc)

    # ─── EXPRESSIONS (precedence climbing) ───────────────────────────
    # Precedence (low → high):
    #   OR
    #   AND
    #   NOT
    #   comparison:  = != <> < > <= >= LIKE IN BETWEEN IS, ANY/ALL
    #   addition:    + - ||
    #   multiply:    * / %
    #   unary:       - + NOT
    #   atom:        literal, column, func, (, CASE, CAST, subselect

    def _expr(self) -> Expr:
        with self._nested():
            return self._or()

    def _or(self) -> Expr:
        left = self._and()
        while self._eat_if(TT.OR):
            left = BinOp("OR", left, self._and())
        return left

    def _and(self) -> Expr:
        left = self._not()
        while self._eat_if(TT.AND):
            left = BinOp("AND", left, self._not())
        return left

    def _not(self) -> Expr:
        negations = 0
        while self._eat_if(TT.NOT):
            negations += 1
        e = self._comparison()
        for _ in range(negations):
            e = UnaryNot(e)
        return e

    def _comparison(self) -> Expr:
        left = self._addition()
        # IS [NOT] NULL | TRUE | FALSE | UNKNOWN | DISTINCT FROM e
        if self._peek() == TT.IS:
            self._eat(TT.IS)
            neg = self._eat_if(TT.NOT)
            if self._eat_if(TT.NULL):
                return IsNullExpr(expr=left, negated=neg)
            if self._eat_if(TT.DISTINCT):
                self._eat(TT.FROM)
                return IsDistinctExpr(left=left, right=self._addition(), negated=neg)
            if self._peek() in (TT.TRUE, TT.FALSE):
                truth = self._advance().type.name
            else:
                truth = self._eat_word("UNKNOWN")
            return IsTruthExpr(expr=left, truth=truth, negated=neg)
        # [NOT] LIKE / IN / BETWEEN
        neg = False
        if self._peek() == TT.NOT and self._peek_at(1) in (TT.LIKE, TT.ILIKE, TT.IN, TT.BETWEEN):
            self._advance()
            neg = True
        if self._peek() in (TT.LIKE, TT.ILIKE):
            ilike = self._advance().type == TT.ILIKE
            pattern = self._addition()
            escape = self._addition() if self._eat_word_if("ESCAPE") else None
            return LikeExpr(expr=left, pattern=pattern, negated=neg, escape=escape, ilike=ilike)
        if self._peek() == TT.IN:
            self._eat(TT.IN); self._eat(TT.LPAREN)
            if self._peek() in (TT.SELECT, TT.WITH):
                sub = self._query()
                self._eat(TT.RPAREN)
                return InExpr(expr=left, values=None, subsel=sub, negated=neg)
            vals = [self._expr()]
            while self._eat_if(TT.COMMA):
                vals.append(self._expr())
            self._eat(TT.RPAREN)
            return InExpr(expr=left, values=vals, subsel=None, negated=neg)
        if self._peek() == TT.BETWEEN:
            self._eat(TT.BETWEEN)
            lo = self._addition()
            self._eat(TT.AND)
            hi = self._addition()
            return BetweenExpr(expr=left, low=lo, high=hi, negated=neg)
        # binary comparisons, optionally quantified
        if self._peek() in CMP:
            op = CMP[self._advance().type]
            if self._peek() in (TT.ANY, TT.ALL, TT.SOME):
                quant = self._advance().type.name
                self._eat(TT.LPAREN)
                sub = self._query()
                self._eat(TT.RPAREN)
                return QuantifiedCmp(op=op, expr=left, quantifier=quant, subsel=sub)
            return BinOp(op, left, self._addition())
        return left

    def _addition(self) -> Expr:
        left = self._multiply()
        ops = {TT.PLUS: '+', TT.MINUS: '-', TT.CONCAT: '||'}
        while self._peek() in ops:
            op = ops[self._advance().type]
            left = BinOp(op, left, self._multiply())
        return left

    def _multiply(self) -> Expr:
        left = self._unary()
        while self._peek() in (TT.STAR, TT.SLASH, TT.PERCENT):
            t = self._advance().type
            op = {'STAR': '*', 'SLASH': '/', 'PERCENT': '%'}[t.name]
            left = BinOp(op, left, self._unary())
        return left

    def _unary(self) -> Expr:
        prefix = []
        while self._peek() in (TT.MINUS, TT.PLUS, TT.NOT):
            prefix.append(self._advance().type)
        e = self._atom()
        for op in reversed(prefix):
            match op:
                case TT.MINUS: e = UnaryMinus(e)
                case TT.NOT:   e = UnaryNot(e)
        return e

    def _atom(self) -> Expr:
        t = self._cur()
        # literals
        if t.type == TT.INT:    self._advance(); return self._maybe_cast(LitInt(t.value))
        if t.type == TT.FLOAT:  self._advance(); return self._maybe_cast(LitFloat(t.value))
        if t.type == TT.STR:    self._advance(); return self._maybe_cast(LitStr(t.value))
        if t.type == TT.TRUE:   self._advance(); return LitBool(True)
        if t.type == TT.FALSE:  self._advance(); return LitBool(False)
        if t.type == TT.NULL:   self._advance(); return LitNull()
        if t.type == TT.PARAM:  self._advance(); return Param(t.value)
        if t.type == TT.DEFAULT: self._advance(); return DefaultExpr()

        # CASE
        if t.type == TT.CASE:
            return self._maybe_cast(self._case_expr())

        # CAST(expr AS type)
        if t.type == TT.CAST:
            self._advance(); self._eat(TT.LPAREN)
            e = self._expr()
            self._eat(TT.AS)
            to = self._type_name()
            self._eat(TT.RPAREN)
            return CastExpr(expr=e, to=to)

        # EXISTS
        if t.type == TT.EXISTS:
            self._advance(); self._eat(TT.LPAREN)
            sub = self._query()
            self._eat(TT.RPAREN)
            return ExistsExpr(sub)

        # sub-select  ( SELECT … )
        if t.type == TT.LPAREN:
            self._advance()
            if self._peek() in (TT.SELECT, TT.WITH):
                sub = self._query()
                self._eat(TT.RPAREN)
                return self._maybe_cast(SubSelectExpr(sub))
            # grouped expression
            e = self._expr()
            self._eat(TT.RPAREN)
            return self._maybe_cast(e)

        # function-style keywords: LEFT(…), RIGHT(…), IF(…)
        if t.type in KEYWORD_AS_FUNC and self._peek_at(1) == TT.LPAREN:
            self._advance()
            return self._maybe_cast(self._func_call(t.value))

        # identifier: could be column ref, function call or typed literal
        if t.type == TT.IDENT or t.type in KEYWORD_AS_IDENT:
            name = self._advance().value
            if self._peek() == TT.LPAREN:
                return self._maybe_cast(self._func_call(name))
            # DATE '2024-01-01', TIMESTAMP '…', INTERVAL '1' DAY
            if self._peek() == TT.STR and name.upper() in ("DATE", "TIME", "TIMESTAMP", "INTERVAL"):
                lit = LitStr(self._advance().value)
                if name.upper() == "INTERVAL":
                    self._eat_word_if("YEAR", "MONTH", "DAY", "HOUR", "MINUTE", "SECOND")
                return CastExpr(expr=lit, to=name.upper())
            # qualified column?  tbl.col  schema.tbl.col  tbl.*
            table = None
            while self._eat_if(TT.DOT):
                if self._eat_if(TT.STAR):
                    return StarExpr(table=name if table is None else f"{table}.{name}")
                table = name if table is None else f"{table}.{name}"
                name = self._eat_ident()
            return self._maybe_cast(ColRef(table=table, name=name))

        raise ParseError("expected expression", t)

    def _func_call(self, name: str) -> FuncCall:
        self._eat(TT.LPAREN)
        distinct = self._eat_if(TT.DISTINCT)
        if not distinct:
            self._eat_if(TT.ALL)
        if self._eat_if(TT.RPAREN):
            args = []
        elif self._eat_if(TT.STAR):
            self._eat(TT.RPAREN)
            args = [StarExpr()]
        elif name.upper() == "EXTRACT":
            # EXTRACT(YEAR FROM order_date)
            part = self._eat_ident()
            self._eat(TT.FROM)
            args = [ColRef(table=None, name=part.upper()), self._expr()]
            self._eat(TT.RPAREN)
        else:
            args = [self._expr()]
            while self._eat_if(TT.COMMA):
                args.append(self._expr())
            self._eat(TT.RPAREN)
        call = FuncCall(name=name, args=args, distinct=distinct)
        if self._eat_word_if("OVER"):
            self._window_spec()
            call.over = True
        return call

    def _window_spec(self):
        """OVER ( [PARTITION BY …] [ORDER BY …] )"""
        self._eat(TT.LPAREN)
        if self._eat_word_if("PARTITION"):
            self._eat(TT.BY)
            self._expr()
            while self._eat_if(TT.COMMA):
                self._expr()
        if self._eat_if(TT.ORDER):
            self._eat(TT.BY)
            self._order_item()
            while self._eat_if(TT.COMMA):
                self._order_item()
        self._eat(TT.RPAREN)

    def _maybe_cast(self, e: Expr) -> Expr:
        if self._eat_if(TT.DCOLON):
            return CastExpr(expr=e, to=self._type_name())
        return e

    def _case_expr(self) -> CaseExpr:
        self._eat(TT.CASE)
        operand = None
        # simple CASE: CASE <expr> WHEN …
        if self._peek() != TT.WHEN:
            operand = self._expr()
        whens = []
        while self._eat_if(TT.WHEN):
            cond = self._expr()
            self._eat(TT.THEN)
            res  = self._expr()
            whens.append((cond, res))
        if not whens:
            raise ParseError("expected WHEN", self._cur())
        else_ = None
        if self._eat_if(TT.ELSE):
            else_ = self._expr()
        self._eat(TT.END)
        return CaseExpr(operand=operand, whens=whens, else_=else_)


# ── module-level helpers ────────────────────────────────────────────────────
def parse(sql: str) -> Statement:
    """Parse exactly one statement."""
    return Parser(Lexer(sql).tokenise()).parse()


def parse_script(sql: str, require_semicolon: bool = False) -> list[Statement]:
    """Parse every statement in a snippet, in order."""
    return Parser(Lexer(sql).tokenise()).parse_script(require_semicolon=require_semicolon)
