# Generated initial migration for marathons app
from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Marathon',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('slug', models.CharField(max_length=16, unique=True, validators=[django.core.validators.RegexValidator(message="Slug must be 1-16 characters of a-z, 0-9, '_' or '-'.", regex='^[a-z0-9_-]{1,16}$')])),
                ('description', models.TextField(blank=True, default='')),
                ('min_team_size', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(50)])),
                ('max_team_size', models.PositiveIntegerField(default=5, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(50)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('creator', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='created_marathons', to=settings.AUTH_USER_MODEL)),
                ('organizers', models.ManyToManyField(blank=True, related_name='organized_marathons', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['created_at'], name='marathon_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='Participant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(blank=True, default='', max_length=100)),
                ('nickname', models.CharField(blank=True, max_length=32, null=True)),
                ('roles', models.JSONField(blank=True, default=list)),
                ('technologies', models.JSONField(blank=True, default=list)),
                ('description', models.TextField(blank=True, default='')),
                ('is_banned', models.BooleanField(default=False)),
                ('ban_reason', models.TextField(blank=True, default='')),
                ('is_suspended', models.BooleanField(default=False)),
                ('suspend_reason', models.TextField(blank=True, default='')),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('marathon', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participants', to='marathons.marathon')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participations', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Team',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('management_type', models.CharField(choices=[('scrum', 'Scrum'), ('kanban', 'Kanban'), ('agile', 'Agile'), ('waterfall', 'Waterfall'), ('free', 'Free')], default='free', max_length=16)),
                ('decision_system', models.CharField(choices=[('dictatorship', 'Dictatorship'), ('democracy', 'Democracy')], default='democracy', max_length=16)),
                ('member_count', models.PositiveIntegerField(default=0)),
                ('genre', models.CharField(blank=True, default='', max_length=64)),
                ('description', models.TextField(blank=True, default='')),
                ('pitch_document', models.URLField(blank=True, default='', max_length=1024)),
                ('design_document', models.URLField(blank=True, default='', max_length=1024)),
                ('chat_link', models.URLField(blank=True, default='', max_length=1024)),
                ('git_link', models.URLField(blank=True, default='', max_length=1024)),
                ('is_suspended', models.BooleanField(default=False)),
                ('suspend_reason', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('leader', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='led_teams', to='marathons.participant')),
                ('marathon', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='teams', to='marathons.marathon')),
            ],
            options={
                'indexes': [models.Index(fields=['marathon', 'created_at'], name='team_marathon_created_idx')],
                'constraints': [models.UniqueConstraint(fields=('marathon', 'name'), name='team_marathon_name_uniq')],
            },
        ),
        migrations.AddField(
            model_name='participant',
            name='team',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='members', to='marathons.team'),
        ),
        migrations.AddIndex(
            model_name='participant',
            index=models.Index(fields=['marathon', 'team'], name='participant_marathon_team_idx'),
        ),
        migrations.AddConstraint(
            model_name='participant',
            constraint=models.UniqueConstraint(fields=('marathon', 'user'), name='participant_marathon_user_uniq'),
        ),
        migrations.AddConstraint(
            model_name='participant',
            constraint=models.UniqueConstraint(fields=('marathon', 'nickname'), name='participant_marathon_nick_uniq'),
        ),
        migrations.CreateModel(
            name='OpenPosition',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(max_length=64)),
                ('description', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('marathon', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='open_positions', to='marathons.marathon')),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='open_positions', to='marathons.team')),
            ],
        ),
        migrations.CreateModel(
            name='Application',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('message', models.TextField(blank=True, default='')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('rejected', 'Rejected'), ('cancelled', 'Cancelled')], default='pending', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('marathon', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applications', to='marathons.marathon')),
                ('participant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applications', to='marathons.participant')),
                ('team', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='applications', to='marathons.team')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['team', 'status'], name='application_team_status_idx'),
                    models.Index(fields=['participant', 'status'], name='application_part_status_idx'),
                ],
                'constraints': [models.UniqueConstraint(condition=models.Q(('status', 'pending')), fields=('participant', 'team'), name='application_one_pending_uniq')],
            },
        ),
        migrations.CreateModel(
            name='TeamRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('invite', 'Invite'), ('open_position', 'Open position'), ('close_position', 'Close position'), ('kick', 'Kick'), ('update_settings', 'Update settings'), ('accept_application', 'Accept application'), ('reject_application', 'Reject application'), ('transfer_lead', 'Transfer lead'), ('change_decision_system', 'Change decision system')], max_length=32)),
                ('payload', models.JSONField(blank=True, default=dict)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=16)),
                ('decided_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('author', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='authored_requests', to='marathons.participant')),
                ('decided_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='decided_requests', to='marathons.participant')),
                ('marathon', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='team_requests', to='marathons.marathon')),
                ('team', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='requests', to='marathons.team')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['team', 'status'], name='teamrequest_team_status_idx')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('status', 'pending')), fields=('team', 'type'), name='teamrequest_one_pending_type_uniq')],
            },
        ),
        migrations.CreateModel(
            name='Invitation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('message', models.TextField(blank=True, default='')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('declined', 'Declined'), ('invalidated', 'Invalidated')], default='pending', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('marathon', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='invitations', to='marathons.marathon')),
                ('participant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='invitations', to='marathons.participant')),
                ('request', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='invitations', to='marathons.teamrequest')),
                ('team', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='invitations', to='marathons.team')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['participant', 'status'], name='invitation_part_status_idx'),
                    models.Index(fields=['team', 'status'], name='invitation_team_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TeamRequestVote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('vote', models.CharField(choices=[('approve', 'Approve'), ('reject', 'Reject')], max_length=8)),
                ('voted_at', models.DateTimeField(auto_now_add=True)),
                ('participant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='votes', to='marathons.participant')),
                ('request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='votes', to='marathons.teamrequest')),
            ],
            options={
                'constraints': [models.UniqueConstraint(fields=('request', 'participant'), name='vote_request_participant_uniq')],
            },
        ),
    ]
