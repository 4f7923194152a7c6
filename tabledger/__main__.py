from tabledger.app.main import main

raise SystemExit(main())
