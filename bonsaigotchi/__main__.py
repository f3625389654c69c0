import sys

from bonsaigotchi.viewer import main

sys.exit(main())
