from quiz_manager.cli import main

raise SystemExit(main())
