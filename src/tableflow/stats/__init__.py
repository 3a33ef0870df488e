"""Statistics used by table cells.

- Numeric summaries for continuous variables (mean (SD), median [IQR], ...)
- Group comparison tests returning p-values rounded to 4 decimals:
  ttest, welch, kruskal, anova for continuous variables; fisher and chisq
  for categorical ones

Public API:
-----------
from tableflow.stats.tests import build
from tableflow.stats.summaries import BUILTIN_SUMMARIES
"""
