import sys

from gradewatch.runner import main

sys.exit(main())
