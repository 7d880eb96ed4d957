"""Mini README: Core package initialiser for Dairy Ledger.

Dairy Ledger keeps herd activity records (milk production, feeding,
breeding) and the financial ledger entries derived from them in step. The
package root only re-exports the logging helper so importing it stays
cheap; the ``finance``, ``records`` and ``interface`` subpackages hold the
real services.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
