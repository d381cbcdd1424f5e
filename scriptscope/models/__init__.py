# Models package. Import from the specific submodule
# (e.g. scriptscope.models.scripts).
