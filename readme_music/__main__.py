import sys

from readme_music.cli import main

sys.exit(main())
