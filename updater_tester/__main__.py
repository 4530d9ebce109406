"""Allow ``python -m updater_tester``."""

from updater_tester.main import main

main()
