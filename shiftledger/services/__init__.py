"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business logic layer.
Approval, correction, override, shift edits, and export orchestrate the
pure rule modules (shift_state, time_rules, overtime) with repositories.
Services flush; routers own the commit.
"""
