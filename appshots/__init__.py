"""
App Store screenshot composer.

Modules:
- specs: screenshot targets and device frame catalogues
- validation: uploaded screenshot size checks
- localization: per-locale headline resolution
- layout: slide config -> pixel geometry
- render: Pillow compositor
- export: PNG / ZIP export
- project: persisted project loading and normalization
- presets: background colours, gradients and fonts
- assets: namespaced blob store
- translator: LLM caption translation
- core: export orchestration
"""
