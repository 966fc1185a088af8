# lantern

The intermediate representation and the expression simplification passes of a
Luau bytecode decompiler.

A function is held as a `HirFunc` (`lantern.func`). It has a control flow
graph of basic blocks (`CfgGraph` and `HirBlock` in `lantern.cfg`), a flat
expression arena (`ExprArena` in `lantern.arena`) and a variable table
(`VarTable` in `lantern.var`). Expressions (`lantern.expr`) refer to each
other by `ExprId`. A temporary can therefore be substituted by overwriting a
single arena slot. Statements and assignment targets live in `lantern.stmt`.
Operators and literal kinds live in `lantern.types`.

## Installing

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

## Passes

Each pass changes a `HirFunc` in place. The passes work on flat CFG blocks and
on nested, structured statement lists alike.

- `lantern.multi_return.collapse_multi_returns(func)` joins a call, method
  call or `...`, together with the `Select` assignments that follow it, into
  one `MultiAssign`. When every statement was a `LocalDecl`, the result is a
  `MultiLocalDecl` instead. The call's `result_count` is set to the number of
  targets.
- `lantern.split_temps.split_multi_def_temps(func)` gives an unnamed
  temporary that is defined more than once in a statement list a fresh
  variable for each definition after the first. Uses between definitions are
  rewritten to match.
- `lantern.inline.eliminate_temporaries(func)` inlines unnamed temporaries
  that are used once and drops dead stores. An unused call result becomes an
  expression statement. Inlining is skipped where it would empty a
  conditional body or move a definition across CFG blocks. The pass repeats
  until nothing changes, at most 100 times.
- `lantern.table_fold.fold_table_constructors(func)` moves consecutive
  `t[k] = v` and `t.f = v` writes into the table constructor they follow.
- `lantern.branch_inline.inline_branch_locals(func)` inlines a temporary
  whose definition and single use are in the same statement list, such as one
  branch of an `if`.

`lantern.analysis` holds the queries these passes share:
`expr_has_side_effects`, `is_statement_expr`, `collect_side_effect_calls`,
`is_var_used_as_table_target`, `count_uses`, `build_use_blocks` and
`collect_stmt_expr_ids`.

A typical sequence:

```python
from lantern.multi_return import collapse_multi_returns
from lantern.split_temps import split_multi_def_temps
from lantern.inline import eliminate_temporaries
from lantern.table_fold import fold_table_constructors
from lantern.branch_inline import inline_branch_locals

collapse_multi_returns(func)
split_multi_def_temps(func)
eliminate_temporaries(func)
fold_table_constructors(func)
eliminate_temporaries(func)
inline_branch_locals(func)
```

## Building a function by hand

```python
from lantern.func import HirFunc
from lantern.var import VarInfo
from lantern.expr import Global, Call, Var
from lantern.stmt import LocalTarget, Assign, ExprStmt
from lantern.inline import eliminate_temporaries

func = HirFunc(0)
tmp = func.vars.alloc(VarInfo())
print_fn = func.exprs.alloc(Global("print"))
value = func.exprs.alloc(Global("x"))
use = func.exprs.alloc(Var(tmp))
call = func.exprs.alloc(Call(print_fn, [use], 1, 0))

entry = func.cfg[func.entry]
entry.stmts = [Assign(LocalTarget(tmp), value), ExprStmt(call)]

eliminate_temporaries(func)
# entry.stmts is now [ExprStmt(call)], and the call's argument is Global("x").
```

## Timing

`lantern.timing` records how long each phase takes, in seconds, per function
(`FuncTimings`) and per file (`FileTimings`). `PipelineReport` aggregates the
files. Its `print_summary(stream)` and `print_slowest(n, stream)` methods write
to the given stream, or to stderr when none is given. `timed(fn)` calls `fn`
and returns `(result, seconds)`.

## What this package does not do

This package holds the function representation and the simplification passes
only. It does not read bytecode files. It does not lift instructions into the
representation, recover variables from debug scopes, structure the control
flow graph into nested statements, or emit and format Lua source. It has no
command-line tool. A `HirFunc` has to be built by the caller, as in the
example above.