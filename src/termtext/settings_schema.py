from termtext.settings import SchemaDict

SCHEMA: list[SchemaDict] = [
    {
        "key": "buffer",
        "title": "Text buffer",
        "type": "object",
        "fields": [
            {
                "key": "edit_mode",
                "title": "Edit mode",
                "help": "Should typed characters replace (overwrite) or shift (insert) existing text?",
                "type": "choices",
                "choices": ["overwrite", "insert"],
                "default": "overwrite",
            },
            {
                "key": "viewport_policy",
                "title": "Vertical alignment",
                "help": "How lines are aligned when they don't fill the viewport.",
                "type": "choices",
                "choices": ["always_top", "always_bottom", "bottom_on_overflow"],
                "default": "always_top",
            },
        ],
    },
    {
        "key": "colors",
        "title": "Colors",
        "type": "object",
        "fields": [
            {
                "key": "foreground",
                "title": "Text color",
                "type": "string",
                "default": "#000000",
            },
            {
                "key": "background",
                "title": "Background color",
                "type": "string",
                "default": "#ffffff",
            },
            {
                "key": "cursor_insert",
                "title": "Cursor color (insert)",
                "type": "string",
                "default": "#000000",
            },
            {
                "key": "cursor_normal",
                "title": "Cursor color (normal)",
                "type": "string",
                "default": "#000000",
            },
            {
                "key": "bold",
                "title": "Bold text",
                "type": "boolean",
                "default": False,
            },
        ],
    },
]
