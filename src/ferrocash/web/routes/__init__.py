"""
API route package.

- health: liveness and storage check
- registers: register directory, current session, summary, history
- sessions: open, close, details
- movements: ledger entries
- checks: check wallet and alerts
- changes: data-change websocket
"""
