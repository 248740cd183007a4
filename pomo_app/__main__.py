from pomo_app.main import main

raise SystemExit(main())
