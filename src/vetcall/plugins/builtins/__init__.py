"""Built-in plugins shipped with vetcall."""
