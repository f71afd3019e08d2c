"""gh-release: semantic-version releases driven by GitHub issues."""
