from blog_service.app import main

main()
