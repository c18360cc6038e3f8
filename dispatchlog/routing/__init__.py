"""dispatchlog event routing - one destination per diagnostic context.

The ``DispatcherSink`` derives a routing key from each event's nested
diagnostic context and delivers the event to a destination built for that
key by copying a template sink (``SinkCopier``) and caching the copy
(``DestinationCache``).  Events without a context go to the template.

Sinks are pluggable: files, the Rich console, in-memory collectors, or any
class implementing the ``ConfigurableSink`` protocol.
"""
