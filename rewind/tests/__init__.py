"""
Test suite for the history engine.

Focus areas:
- Replay determinism and error containment
- Meta-action transitions of the lifted reducer
- Projection of the selected state through the instrumented store
- Wire format and export
"""
