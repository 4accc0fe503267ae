import sys

from multiboot_utils.main import main

sys.exit(main())
