from cipherreg.app.main import main

raise SystemExit(main())
