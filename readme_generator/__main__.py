"""``python -m readme_generator``."""

from readme_generator.generator import main

main()
