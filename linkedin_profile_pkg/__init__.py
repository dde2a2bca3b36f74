"""LinkedIn profile scraper package.

Small, well-defined modules for session acquisition, browser lifecycle,
profile extraction and scrape orchestration, shared by the HTTP service
(`app.py`) and the command-line entry point (`scraper.py`).
"""
