"""AppleScript bridge between typed requests and OmniFocus.

Every command flows through the same pipeline: validation -> composition
(with cached script fragments) -> one osascript subprocess -> decoding and
failure classification -> `Outcome`. Multi-item mutations wrap that pipeline
in the sequential chunk loop of `ofocus.bridge.batch`.
"""
