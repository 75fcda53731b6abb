from git_pending.cli import main

raise SystemExit(main())
