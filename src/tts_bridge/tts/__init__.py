"""
Conversion Pipeline Components.

    - chunker.py: Word-wrap splitting of oversized text
    - options.py: Validated generic conversion options
    - sources.py: Text, file and URL text sources
    - storage.py: Persisting audio under derived filenames
    - clients.py: Provider SDK client construction
    - converter.py: BaseConverter and conversion data types
    - converters/: Polly, Google and Null converters
    - manager.py: Driver registry and lazy converter cache
"""
