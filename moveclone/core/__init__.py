"""
moveclone.core: shared diagnostics/span records used across stages.

Modules:
  - diagnostics: Diagnostic record + DiagnosticReporter sink
  - span: best-effort source locations
"""
