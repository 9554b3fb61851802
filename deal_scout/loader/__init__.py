"""
Loader core: jobs, session state, materializer and the request sequencer.
"""
