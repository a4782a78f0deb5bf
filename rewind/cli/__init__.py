"""
Rewind CLI - inspect and replay action histories

Commands:
- rewind replay - Replay a JSONL action file through a reducer
- rewind log show/verify - Inspect an exported lifted state
- rewind version
"""
