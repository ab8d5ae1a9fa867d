"""
Solution wrapper for modified permutation tests.

MopetSolution wraps Result[MopetParams] and presents it as a compact
table (coefficients, statistic and the three p-values with significance
codes) or as a per-column narrative summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pycwm.core.result import Result
from pycwm.methods import statistic_name
from pycwm.permutation._common import ColumnOutcome, MopetParams

if TYPE_CHECKING:
    import pandas as pd
    from pycwm.permutation.design import MopetDesign

SIGNIF_CUTPOINTS = (0.001, 0.01, 0.05, 0.1)
SIGNIF_SYMBOLS = ('***', '**', '*', '.', ' ')
SIGNIF_LEGEND = "Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1"

_P_EPS = 2.2e-16


def signif_stars(p: float | None) -> str:
    """R-style significance code of a p-value."""
    if p is None or np.isnan(p):
        return ''
    for cut, symbol in zip(SIGNIF_CUTPOINTS, SIGNIF_SYMBOLS):
        if p <= cut:
            return symbol
    return SIGNIF_SYMBOLS[-1]


def format_p(p: float | None, digits: int = 3) -> str:
    if p is None or np.isnan(p):
        return 'NA'
    if p < _P_EPS:
        return '<2e-16'
    return f'{p:.{digits}g}'


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f'{value:.6g}'
    if isinstance(value, (tuple, list)):
        return '  '.join(_format_value(v) for v in value)
    if isinstance(value, dict):
        return '  '.join(f'{k}: {_format_value(v)}' for k, v in value.items())
    return str(value)


@dataclass
class MopetSolution:
    """
    User-facing permutation test results.

    One ColumnOutcome per tested column: weighted-mean attributes under
    ``M ~ env``, environmental variables under ``env ~ M``.
    """
    _result: Result[MopetParams]
    _design: 'MopetDesign'

    # --- Outcomes ---

    @property
    def outcomes(self) -> tuple[ColumnOutcome, ...]:
        return self._result.params.outcomes

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(o.name for o in self.outcomes)

    @property
    def coefficients(self) -> dict[str, dict[str, float]]:
        return {o.name: o.coefficients for o in self.outcomes}

    @property
    def statistic(self) -> NDArray[np.floating[Any]]:
        """Test statistic of the real fit per column."""
        return np.array([o.statistic for o in self.outcomes])

    @property
    def orig_p(self) -> NDArray[np.floating[Any]]:
        """Parametric p-values."""
        return np.array([o.orig_p for o in self.outcomes])

    @property
    def perm_p(self) -> NDArray[np.floating[Any]] | None:
        """Standard permutation p-values, or None if the test was not run."""
        if not self._design.runs_standard:
            return None
        return np.array([o.perm_p for o in self.outcomes])

    @property
    def modif_p(self) -> NDArray[np.floating[Any]] | None:
        """Modified permutation p-values, or None if the test was not run."""
        if not self._design.runs_modified:
            return None
        return np.array([o.modif_p for o in self.outcomes])

    @property
    def real_summaries(self) -> dict[str, dict[str, Any]]:
        return {o.name: o.real_summary for o in self.outcomes}

    @property
    def errors(self) -> dict[str, Exception]:
        """Columns whose real fit failed."""
        return {o.name: o.error for o in self.outcomes if o.error is not None}

    # --- Test settings ---

    @property
    def permutations(self) -> int:
        return self._result.params.permutations

    @property
    def method(self) -> str:
        return self._result.params.method

    @property
    def cor_coef(self) -> str:
        return self._result.params.cor_coef

    @property
    def dependence(self) -> str:
        return self._result.params.dependence

    @property
    def test(self) -> str:
        return self._result.params.test

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Access ---

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self) -> Iterator[ColumnOutcome]:
        return iter(self.outcomes)

    def column(self, key: int | str) -> ColumnOutcome:
        """Outcome of one column, by index or name."""
        if isinstance(key, str):
            key = self.names.index(key)
        return self.outcomes[key]

    def _coefficient_names(self) -> list[str]:
        seen: list[str] = []
        for o in self.outcomes:
            for name in o.coefficients:
                if name not in seen:
                    seen.append(name)
        return seen

    def to_dataframe(self) -> 'pd.DataFrame':
        """One row per column: coefficients, statistic and p-values."""
        import pandas as pd

        coef_names = self._coefficient_names()
        rows = []
        for o in self.outcomes:
            row = {name: o.coefficients.get(name, np.nan) for name in coef_names}
            row[o.statistic_name] = o.statistic
            row['orig_p'] = o.orig_p
            if self._design.runs_standard:
                row['perm_p'] = o.perm_p
            if self._design.runs_modified:
                row['modif_p'] = o.modif_p
            rows.append(row)
        return pd.DataFrame(rows, index=list(self.names))

    # --- Display ---

    def table(self, digits: int = 3) -> str:
        """
        Compact table, one row per column.

        Produces:
                 (Intercept)        x  F value  orig.P     modif.P
            attr1       4.21   0.0312     25.3  2.1e-06 ***  0.004 **
        """
        coef_names = self._coefficient_names()
        stat_name = statistic_name(self._design.spec, self.cor_coef)

        header = [''] + coef_names + [stat_name, 'orig.P', '']
        p_columns = [('orig_p', 'orig.P')]
        if self._design.runs_standard:
            header += ['perm.P', '']
            p_columns.append(('perm_p', 'perm.P'))
        if self._design.runs_modified:
            header += ['modif.P', '']
            p_columns.append(('modif_p', 'modif.P'))

        rows = [header]
        for o in self.outcomes:
            row = [o.name]
            for name in coef_names:
                value = o.coefficients.get(name)
                row.append('NA' if value is None else f'{value:.{digits}g}')
            row.append('NA' if np.isnan(o.statistic) else f'{o.statistic:.{digits}g}')
            for attr, _ in p_columns:
                p = getattr(o, attr)
                row += [format_p(p, digits), signif_stars(p)]
            rows.append(row)

        widths = [max(len(r[i]) for r in rows) for i in range(len(header))]
        lines = []
        for r in rows:
            cells = []
            for i, cell in enumerate(r):
                if i == 0:
                    cells.append(cell.ljust(widths[i]))
                elif header[i] == '':
                    cells.append(cell.ljust(widths[i]))
                else:
                    cells.append(cell.rjust(widths[i]))
            lines.append(' '.join(cells).rstrip())
        lines.append('---')
        lines.append(SIGNIF_LEGEND)
        return '\n'.join(lines)

    def summary(self) -> str:
        """
        Per-column narrative: the real model, the permutation p-values
        and the number of permutations they are based on.
        """
        description = self._design.spec.description
        if self.method == 'cor':
            description = f"{description} ({self.cor_coef})"
        lines = ["\nSummary of mopet function:", f"Method: {description}"]
        for o in self.outcomes:
            lines.append(f"\nOriginal result for variable {o.name} :")
            if o.error is not None:
                lines.append(f"  model could not be fitted: {o.error}")
            else:
                lines.append(
                    f"  {o.statistic_name} = {o.statistic:.6g}, "
                    f"p-value = {format_p(o.orig_p, 4)}"
                )
                lines.append("  Coefficients:")
                for name, value in o.coefficients.items():
                    lines.append(f"    {name:>16s} {value:12.6g}")
                for key, value in o.real_summary.items():
                    if key == 'p_value':
                        continue
                    lines.append(f"  {key}: {_format_value(value)}")
            lines.append("")
            lines.append("------------------------------------------------")
            if o.perm_p is not None:
                lines.append(f"Standard permutation test: P = {format_p(o.perm_p, 4)}")
            if o.modif_p is not None:
                lines.append(f"Modified permutation test: P = {format_p(o.modif_p, 4)}")
            lines.append(f"Permutation results based on {self.permutations} permutations")
            if o.draw_failures:
                lines.append(
                    f"({len(o.draw_failures)} failed draw(s) excluded)"
                )
            lines.append("************************************************")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"MopetSolution(method={self.method!r}, test={self.test!r}, "
            f"permutations={self.permutations}, columns={len(self)})"
        )

    def __str__(self) -> str:
        return self.table()
